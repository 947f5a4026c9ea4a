from pgp_workflow.core.generation import Generation

__all__ = ["Generation"]
