from shared.helper.HelperConfig import HelperConfig
from shared.index.VectorIndexInterface import VectorIndexInterface


class VectorIndexManager:
    """Instantiates the vector index selected by INDEX_ENGINE (default "linear")."""

    def __init__(self, helper_config: HelperConfig):
        self.helper_config = helper_config
        self.logging = helper_config.get_logger()
        self.index = self._initialize_index()

    def _initialize_index(self) -> VectorIndexInterface:
        """Import and instantiate shared.index.<engine>.VectorIndex<Engine>.

        Raises:
            ValueError: If the engine is unsupported or cannot be imported.
        """
        engine = self.helper_config.get_string_val("INDEX_ENGINE", default="linear").strip().lower().capitalize()
        class_name = f"VectorIndex{engine}"
        try:
            module = __import__(
                f"shared.index.{engine.lower()}.{class_name}",
                fromlist=[class_name],
            )
            index_class = getattr(module, class_name)
        except (ImportError, AttributeError) as e:
            raise ValueError("Unsupported vector index engine '%s'. Error: %s" % (engine, e))
        index = index_class(helper_config=self.helper_config)
        self.logging.debug("Instantiated vector index for engine: %s", engine)
        return index

    def get_index(self) -> VectorIndexInterface:
        """Return the instantiated vector index."""
        return self.index
