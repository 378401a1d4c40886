import pytest

from ifa_architect.catalog import POPULAR_ASSETS
from ifa_architect.models import Asset, ClientProfile
from ifa_architect.session import (
    AddCandidate,
    AddHolding,
    AddManualAsset,
    ImportCompleted,
    ProposalSession,
    RemoveHolding,
    RemoveProposed,
    SetPresentation,
    SetProposalCount,
    ToggleProposalType,
    ToggleSubCategory,
    UpdateHolding,
    UpdateProposedAmount,
    reduce_session,
)


def _replay(session, *actions):
    for action in actions:
        session = reduce_session(session, action)
    return session


def test_holding_actions_write_back_to_profile():
    start = ProposalSession()
    session = reduce_session(start, AddHolding(Asset(name="任天堂", amount=100)))
    holding_id = session.profile.current_holdings[0].id

    session = _replay(session, UpdateHolding(holding_id, "amount", "２００"))
    assert session.profile.current_holdings[0].amount == 200
    assert session.profile.current_holdings[0].confidence == 1.0

    session = reduce_session(session, RemoveHolding(holding_id))
    assert session.profile.current_holdings == []
    assert start.profile.current_holdings == []


def test_settings_actions():
    session = _replay(
        ProposalSession(),
        ToggleProposalType("Bond"),
        SetProposalCount("Bond", 4),
        ToggleSubCategory("Bond", "米国国債"),
    )
    assert session.settings.proposal_counts["Bond"] == 4
    assert session.settings.proposal_details["Bond"] == ["米国国債"]


def test_proposed_ledger_actions():
    session = _replay(
        ProposalSession(),
        AddCandidate(Asset(id="rec-1", name="Apple"), default_amount=300_000),
        AddManualAsset(POPULAR_ASSETS[0], default_amount=300_000),
    )
    assert len(session.proposed) == 2
    candidate_id = session.proposed.assets[0].id

    session = reduce_session(session, UpdateProposedAmount(candidate_id, "1,000,000"))
    assert session.proposed.get(candidate_id).amount == 1_000_000

    session = reduce_session(session, RemoveProposed(candidate_id))
    assert candidate_id not in session.proposed.ids()


def test_presentation_and_import(full_deck):
    imported = ClientProfile(age=33)
    session = _replay(ProposalSession(), SetPresentation(full_deck), ImportCompleted(imported))
    assert session.presentation is full_deck
    assert session.profile is imported


def test_unknown_action_is_a_type_error():
    with pytest.raises(TypeError):
        reduce_session(ProposalSession(), object())
