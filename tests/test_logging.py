import json
import logging

from ifa_architect.utils.logging import JSONFormatter


def _record(**extra):
    record = logging.LogRecord("ifa_audit", logging.INFO, __file__, 10, "Proposal assembled", None, None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_audit_fields():
    entry = json.loads(JSONFormatter().format(_record(
        session_id="s-1", action="PROPOSAL_ASSEMBLED", proposal={"slide_count": 15, "used_fallback": False},
    )))
    assert entry["session_id"] == "s-1"
    assert entry["action"] == "PROPOSAL_ASSEMBLED"
    assert entry["proposal"] == {"slide_count": 15, "used_fallback": False}


def test_json_formatter_omits_empty_proposal():
    entry = json.loads(JSONFormatter().format(_record(session_id="s-1", action="STARTED_X", proposal={})))
    assert "proposal" not in entry
    assert entry["message"] == "Proposal assembled"
