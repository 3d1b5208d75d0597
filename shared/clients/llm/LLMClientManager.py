from shared.helper.HelperConfig import HelperConfig
from shared.clients.llm.LLMClientInterface import LLMClientInterface


class LLMClientManager:
    """Builds the embedding/reasoning client named by LLM_ENGINE.

    The engine name maps onto a module and class by convention:
    "openai" -> shared.clients.llm.openai.LLMClientOpenai.
    """

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.client = self._initialize_client()

    def _initialize_client(self) -> LLMClientInterface:
        """
        Raises:
            ValueError: If LLM_ENGINE is unset or names an engine without a client module.
        """
        engine = self.helper_config.get_string_val("LLM_ENGINE").strip().lower()
        class_name = f"LLMClient{engine.capitalize()}"
        try:
            module = __import__(f"shared.clients.llm.{engine}.{class_name}", fromlist=[class_name])
            client_class: type[LLMClientInterface] = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError("Unsupported LLM engine '%s'. Error: %s" % (engine, e))

        client = client_class(helper_config=self.helper_config)
        self.logging.info(
            "Using LLM engine '%s' (embedding model: %s, chat model: %s)",
            engine,
            client.embed_model,
            client.chat_model,
        )
        return client

    def get_client(self) -> LLMClientInterface:
        return self.client
