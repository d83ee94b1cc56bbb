"""Services for external integrations."""

from app.services.llm import LLMGateway
from app.services.model_catalog import DEFAULT_MODEL_ID, MODELS, get_model
from app.services.profile_cache import LocalProfileCache

__all__ = ["LLMGateway", "DEFAULT_MODEL_ID", "MODELS", "get_model", "LocalProfileCache"]
