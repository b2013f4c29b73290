from abc import ABC, abstractmethod

from models.search_result import ModelInfo


class ModelProvider(ABC):
    """
    Abstract base class for model backends.
    The core components only talk to this interface, so they work with any backend.
    """

    # Set by subclasses
    provider_name: str = ""
    cache_prefix: str = ""

    def __init__(self, model_name: str, **kwargs):
        """
        Initialize the provider.

        Args:
            model_name: The model used for every generation call
            **kwargs: Additional backend-specific parameters
        """
        self.model_name = model_name
        self.temperature = kwargs.get('temperature', 0.7)
        self.timeout_s = kwargs.get('timeout_s', 120.0)

    @property
    def supports_json_mode(self) -> bool:
        """True when the backend can be told to emit JSON only."""
        return True

    @property
    def cache_model_id(self) -> str | None:
        """
        Model segment of page cache keys, for backends where the page depends
        on a user-chosen model. None keeps keys model-independent.
        """
        return None

    @abstractmethod
    async def generate_text(self, prompt: str, *, json_mode: bool = False) -> str:
        """
        Send a prompt and return the raw response text.

        Args:
            prompt: The full prompt
            json_mode: Ask the backend to produce JSON only

        Returns:
            The unparsed response text

        Raises:
            ProviderUnreachable: Connection failure or timeout
            ProviderResponseError: The backend answered with an error
            ProviderNotConfigured / NoModelSelected: Settings are incomplete
        """
        pass

    async def list_models(self) -> list[ModelInfo]:
        """
        List models available on the backend.
        Backends without a model catalogue return an empty list.
        """
        return []
