import functools


def audit_node_wrapper(node_func):
    """Middleware decorator for tracking async graph node execution."""
    @functools.wraps(node_func)
    async def wrapper(state):
        session_id = state.get("session_id", "Unknown")
        node_name = node_func.__name__
        from .logging import log_audit_action

        log_audit_action(session_id, f"STARTED_{node_name.upper()}", f"Node '{node_name}' execution started.")

        try:
            result = await node_func(state)
            log_audit_action(session_id, f"COMPLETED_{node_name.upper()}", f"Node '{node_name}' executed successfully.")
            return result
        except Exception as e:
            log_audit_action(session_id, f"FAILED_{node_name.upper()}", f"Node '{node_name}' failed: {str(e)}")
            raise e

    return wrapper
