from shared.clients.llm.LLMClientInterface import LLMClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.config import EnvConfig


class LLMClientOllama(LLMClientInterface):
    """Self-hosted Ollama backend.

    Chat requests ask Ollama for JSON output ("format": "json") and size the
    context window with LLM_OLLAMA_NUM_CTX so that long documents are not
    silently truncated by the model's default window.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._num_ctx = int(self.get_config_val("NUM_CTX", default=8192, val_type="number"))
        self._keep_alive = self.get_config_val("KEEP_ALIVE", default="5m", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Ollama"

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="NUM_CTX", val_type="number", default=8192),
            EnvConfig(env_key="KEEP_ALIVE", val_type="string", default="5m"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        # only needed behind an authenticating reverse proxy
        return {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/api/tags"

    def get_endpoint_embedding(self) -> str:
        return "/api/embed"

    def _get_endpoint_chat(self) -> str:
        return "/api/chat"

    ################ PAYLOAD BUILDER ##################
    def get_embed_payload(self, texts: list[str]) -> dict:
        return {"model": self.embed_model, "input": texts, "keep_alive": self._keep_alive}

    def get_chat_payload(self, messages: list[dict]) -> dict:
        """Build a non-streaming /api/chat body.

        Sampling settings go into "options"; "num_predict" is Ollama's name for max tokens.
        """
        return {
            "model": self.chat_model,
            "messages": messages,
            "stream": False,
            "format": "json",
            "keep_alive": self._keep_alive,
            "options": {
                "temperature": self.temperature,
                "num_predict": self.max_tokens,
                "num_ctx": self._num_ctx,
            },
        }

    ##########################################
    ################# OTHER ##################
    ##########################################

    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        # /api/embed already returns the vectors in input order
        embeddings = (response_data.get("embeddings") if isinstance(response_data, dict) else None) or []
        if not isinstance(embeddings, list) or not embeddings or any(not vector for vector in embeddings):
            raise ValueError("Ollama returned no usable embeddings (got: %s)" % str(response_data)[:200])
        return embeddings

    def extract_chat_response(self, response_data: dict) -> str:
        if not isinstance(response_data, dict):
            raise ValueError("Ollama chat reply is not a JSON object.")
        if response_data.get("done_reason") == "length":
            self.logging.warning("Ollama reply hit the token limit (%d); the JSON verdict may be cut off.", self.max_tokens)
        message = response_data.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str):
            raise ValueError("Ollama chat reply has no message content (keys: %s)" % sorted(response_data))
        return content
