from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientOpenai(LLMClientInterface):
    """OpenAI-compatible backend (api.openai.com or any server speaking the same protocol)."""

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default="https://api.openai.com/v1", val_type="string")
        self._api_key = self.get_config_val("API_KEY", default=None, val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "OpenAI"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default="https://api.openai.com/v1"),
            EnvConfig(env_key="API_KEY", val_type="string", default=None),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        return {"Authorization": f"Bearer {self._api_key}"}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/models"

    def get_endpoint_embedding(self) -> str:
        return "/embeddings"

    def _get_endpoint_chat(self) -> str:
        return "/chat/completions"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, texts: list[str]) -> dict:
        return {"model": self.embed_model, "input": texts}

    def get_chat_payload(self, messages: list[dict]) -> dict:
        return {
            "model": self.chat_model,
            "messages": messages,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from an OpenAI /embeddings response.

        Items are sorted by their "index" field so the vectors line up with the inputs.

        Raises:
            ValueError: If the response does not contain valid embeddings.
        """
        data = response_data.get("data") if isinstance(response_data, dict) else None
        if not data or not isinstance(data, list):
            raise ValueError(
                "OpenAI response does not contain embedding data. "
                "Response: %s" % str(response_data)[:200]
            )
        if any(not isinstance(item, dict) for item in data):
            raise ValueError("OpenAI embedding data contains a non-object item.")
        items = sorted(data, key=lambda item: item.get("index") or 0)
        embeddings = [item.get("embedding") for item in items]
        if any(not embedding for embedding in embeddings):
            raise ValueError("OpenAI response contains an empty embedding.")
        return embeddings

    def extract_chat_response(self, response_data: dict) -> str:
        """Extract the assistant reply text from an OpenAI /chat/completions response.

        Raises:
            ValueError: If the response does not contain a valid message.
        """
        if not isinstance(response_data, dict):
            raise ValueError("OpenAI chat response is not a JSON object.")
        choices = response_data.get("choices") or []
        first = choices[0] if isinstance(choices, list) and choices else None
        message = (first.get("message") if isinstance(first, dict) else None) or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ValueError(
                "OpenAI chat response does not contain a valid message. "
                "Response keys: %s" % list(response_data.keys())
            )
        usage = response_data.get("usage")
        total_tokens = usage.get("total_tokens", "unknown") if isinstance(usage, dict) else "unknown"
        self.logging.debug("Chat response received: %s tokens", total_tokens)
        return content
