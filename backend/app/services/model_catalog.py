"""Chat models selectable by the client."""

from dataclasses import asdict, dataclass

DEFAULT_MODEL_ID = "learners-amigo"


@dataclass(frozen=True)
class ChatModel:
    id: str
    label: str
    api_identifier: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


MODELS: tuple[ChatModel, ...] = (
    ChatModel(
        id=DEFAULT_MODEL_ID,
        label="Learner's Amigo Recommender",
        api_identifier="claude-sonnet-4-20250514",
        description="Personalized course recommender",
    ),
    ChatModel(
        id="claude-sonnet",
        label="Claude Sonnet",
        api_identifier="claude-sonnet-4-20250514",
        description="Balanced model for everyday tasks",
    ),
    ChatModel(
        id="claude-haiku",
        label="Claude Haiku",
        api_identifier="claude-3-5-haiku-20241022",
        description="Fast model for lightweight tasks",
    ),
)


def get_model(model_id: str) -> ChatModel | None:
    """Look up a model by its client-facing id."""
    return next((model for model in MODELS if model.id == model_id), None)
