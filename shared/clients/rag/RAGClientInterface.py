from abc import abstractmethod
import uuid

import httpx
from shared.clients.ClientInterface import ClientInterface
from shared.helper.HelperConfig import HelperConfig
from shared.models.knowledge import SearchQueryLog, SearchResult, TruthPriority


class RAGClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        """
        Returns the type of the client. E.g. "rag"
        """
        return "rag"

    @abstractmethod
    def get_collection(self) -> str:
        """
        Returns the name of the collection holding the indexed document chunks.
        """
        pass

    @abstractmethod
    def get_search_log_collection(self) -> str:
        """
        Returns the name of the append-only collection holding search query logs.
        """
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_search(self, collection: str) -> str:
        """
        Returns the endpoint path for similarity search requests.

        Args:
            collection (str): The collection to search.

        Returns:
            str: The endpoint path (e.g. "/collections/kb_chunks/points/search")
        """
        pass

    @abstractmethod
    def _get_endpoint_points(self, collection: str) -> str:
        """
        Returns the endpoint path for points upsert requests.

        Args:
            collection (str): The target collection.

        Returns:
            str: The endpoint path (e.g. "/collections/kb_search_history/points")
        """
        pass

    @abstractmethod
    def _get_endpoint_check_collection_existence(self, collection: str) -> str:
        """
        Returns the endpoint path for collection existence check requests.
        """
        pass

    @abstractmethod
    def _get_endpoint_create_collection(self, collection: str) -> str:
        """
        Returns the endpoint path for create collection requests.
        """
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_search_payload(self, vector: list[float], limit: int, score_threshold: float, truth_priority: TruthPriority | None = None) -> dict:
        """
        Builds the backend-specific request body for a similarity search.

        Args:
            vector (list[float]): The query embedding.
            limit (int): Maximum number of hits, already clamped by the caller.
            score_threshold (float): Minimum similarity a hit must reach.
            truth_priority (TruthPriority | None): When set, only chunks of exactly this tier are candidates.

        Returns:
            dict: The payload for the search request.
        """
        pass

    @abstractmethod
    def get_search_log_point(self, record: SearchQueryLog) -> dict:
        """
        Builds the point stored for one search query log record.

        Args:
            record (SearchQueryLog): The record to persist.

        Returns:
            dict: A point ready for upsert.
        """
        pass

    ################ RESPONSE PARSER ##################
    @abstractmethod
    def extract_search_results(self, raw_response: dict) -> list[SearchResult]:
        """
        Converts a raw search response into SearchResult models, preserving backend order.

        Args:
            raw_response (dict): The raw JSON response from the search endpoint.

        Returns:
            list[SearchResult]: The matched chunks.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_existence_check(self, collection: str) -> bool:
        """Check if a collection exists in the rag backend.

        Args:
            collection (str): The collection name.

        Returns:
            bool: True if the collection exists, False otherwise.
        """
        resp = await self.do_request(
            method="GET",
            endpoint=self._get_endpoint_check_collection_existence(collection),
            raise_on_error=True,
        )
        return bool(resp.json().get("result", {}).get("exists"))

    async def do_create_collection(self, collection: str, vector_size: int, distance: str = "Cosine") -> httpx.Response:
        """Create a collection in the rag backend.

        Args:
            collection (str): The collection name.
            vector_size (int): The size of the vectors in the collection.
            distance (str): The distance metric for the vectors.

        Returns:
            httpx.Response: The response from the create collection request.
        """
        return await self.do_request(
            method="PUT",
            json={"vectors": {"size": vector_size, "distance": distance}},
            endpoint=self._get_endpoint_create_collection(collection),
            raise_on_error=True,
        )

    async def do_search(self, vector: list[float], limit: int, score_threshold: float, truth_priority: TruthPriority | None = None) -> list[SearchResult]:
        """Run a similarity search against the chunk collection.

        Args:
            vector (list[float]): The query embedding.
            limit (int): Maximum number of hits.
            score_threshold (float): Minimum similarity.
            truth_priority (TruthPriority | None): Optional hard tier filter.

        Returns:
            list[SearchResult]: Matches in the order returned by the backend.

        Raises:
            ClientRequestError: If the backend answers with a non-2xx status.
        """
        resp = await self.do_request(
            method="POST",
            json=self.get_search_payload(vector, limit, score_threshold, truth_priority),
            endpoint=self._get_endpoint_search(self.get_collection()),
            raise_on_error=True,
        )
        return self.extract_search_results(resp.json())

    async def do_log_search(self, record: SearchQueryLog) -> None:
        """Append a search query log record to the search log collection.

        Args:
            record (SearchQueryLog): The record to persist.

        Raises:
            ClientRequestError: If the backend answers with a non-2xx status.
        """
        await self.do_request(
            method="PUT",
            json={"points": [self.get_search_log_point(record)]},
            endpoint=self._get_endpoint_points(self.get_search_log_collection()),
            raise_on_error=True,
        )

    @staticmethod
    def new_point_id() -> str:
        return str(uuid.uuid4())
