from abc import abstractmethod

from shared.clients.ClientInterface import ClientInterface, ClientRequestError

from shared.helper.HelperConfig import HelperConfig


class EmbedClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # model and embedding config
        self.embed_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_MODEL", default=self._get_default_model())
        self.vector_size = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_VECTOR_SIZE", default=self._get_default_vector_size()))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "embed"

    @abstractmethod
    def _get_default_model(self) -> str:
        """
        Returns the embedding model used when EMBED_MODEL is not set.
        """
        pass

    @abstractmethod
    def _get_default_vector_size(self) -> int:
        """
        Returns the dimension of the default model's vectors, used when EMBED_VECTOR_SIZE is not set.
        Set EMBED_VECTOR_SIZE explicitly whenever EMBED_MODEL is changed.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def get_endpoint_embedding(self) -> str:
        """
        Returns the endpoint path for embedding requests.

        Returns:
            str: The endpoint path for embedding requests (e.g. "/api/embed")
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_embed_payload(self, texts: list[str]) -> dict:
        """Build the backend-specific request body for an embedding request.

        Args:
            texts (list[str]): The texts to embed.

        Returns:
            dict: JSON-serialisable request body (e.g. {"model": "...", "input": [...]}).
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_embeddings_from_response(self, response_data: dict) -> list[list[float]]:
        """Extract embedding vectors from a raw embedding API response.

        Response format differs by backend:
        - Ollama /api/embed: {"embeddings": [[...], [...]]} (already ordered)
        - OpenAI /v1/embeddings: {"data": [{"embedding": [...], "index": 0}]} (needs sorting)

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the input texts.

        Raises:
            ValueError: If the response format is invalid or embeddings are empty.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_embed(self, texts: list[str] | str) -> list[list[float]]:
        """Send an embedding request and return the extracted vectors.

        Args:
            texts (list[str] | str): One or more texts to embed.

        Returns:
            list[list[float]]: Embedding vectors in the same order as the inputs.

        Raises:
            ClientRequestError: If the backend answers with a non-2xx status.
            ValueError: If the response does not contain valid embeddings.
        """
        texts = [texts] if isinstance(texts, str) else texts
        body = self.get_embed_payload(texts)
        response = await self.do_request(method="POST", endpoint=self.get_endpoint_embedding(), json=body)
        if not response.is_success:
            self.logging.error(
                "Embedding request failed: status %d, body: %s",
                response.status_code,
                response.text[:200],
            )
            raise ClientRequestError(
                "Embedding request failed with status %d." % response.status_code,
                url=str(response.request.url),
                status_code=response.status_code,
                body=response.text,
            )
        return self.extract_embeddings_from_response(response.json())

    async def do_embed_query(self, query: str) -> list[float]:
        """Embed a single search query.

        Args:
            query (str): The query text.

        Returns:
            list[float]: The query vector.
        """
        vectors = await self.do_embed([query])
        self.logging.debug("Query vector dimension: %d", len(vectors[0]))
        return vectors[0]
