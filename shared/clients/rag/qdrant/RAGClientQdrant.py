from datetime import datetime, timezone

from shared.helper.HelperConfig import HelperConfig
from shared.clients.rag.RAGClientInterface import RAGClientInterface
from shared.models.config import EnvConfig
from shared.models.knowledge import SearchQueryLog, SearchResult, TruthPriority


class RAGClientQdrant(RAGClientInterface):
    """Qdrant REST backend.

    Chunk collections are expected to use the Cosine distance, so hit scores are
    cosine similarities and the request threshold is a cosine floor.
    """

    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)
        self._base_url = self.get_config_val("BASE_URL", default=None, val_type="string")
        self._api_key = self.get_config_val("API_KEY", default="", val_type="string")
        self._collection_name = self.get_config_val("COLLECTION", default="kb_chunks", val_type="string")
        self._search_log_collection_name = self.get_config_val("SEARCH_LOG_COLLECTION", default="kb_search_history", val_type="string")

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_engine_name(self) -> str:
        return "Qdrant"

    def get_collection(self) -> str:
        return self._collection_name

    def get_search_log_collection(self) -> str:
        return self._search_log_collection_name

    ################ CONFIG ##################
    def _get_required_config(self) -> list[EnvConfig]:
        return [
            EnvConfig(env_key="BASE_URL", val_type="string", default=None),
            EnvConfig(env_key="API_KEY", val_type="string", default=""),
            EnvConfig(env_key="COLLECTION", val_type="string", default="kb_chunks"),
            EnvConfig(env_key="SEARCH_LOG_COLLECTION", val_type="string", default="kb_search_history"),
        ]

    ################ AUTH ##################
    def _get_auth_header(self) -> dict:
        if self._api_key:
            return {"api-key": f"{self._api_key}"}
        return {}

    ################ ENDPOINTS ##################
    def _get_base_url(self) -> str:
        return self._base_url

    def _get_endpoint_healthcheck(self) -> str:
        return "/healthz"

    def _get_endpoint_search(self, collection: str) -> str:
        return f"/collections/{collection}/points/search"

    def _get_endpoint_points(self, collection: str) -> str:
        return f"/collections/{collection}/points"

    def _get_endpoint_check_collection_existence(self, collection: str) -> str:
        return f"/collections/{collection}/exists"

    def _get_endpoint_create_collection(self, collection: str) -> str:
        return f"/collections/{collection}"

    ##########################################
    ########### PAYLOAD BUILDER ##############
    ##########################################

    def get_search_payload(self, vector: list[float], limit: int, score_threshold: float, truth_priority: TruthPriority | None = None) -> dict:
        payload = {
            "vector": vector,
            "limit": limit,
            "score_threshold": score_threshold,
            "with_payload": True,
            "with_vector": False,
        }
        if truth_priority is not None:
            payload["filter"] = {
                "must": [
                    {"key": "truth_priority", "match": {"value": TruthPriority(truth_priority).value}},
                ]
            }
        return payload

    def get_search_log_point(self, record: SearchQueryLog) -> dict:
        payload = record.model_dump(exclude={"query_embedding"})
        payload["created_at"] = datetime.now(timezone.utc).isoformat()
        return {
            "id": self.new_point_id(),
            "vector": record.query_embedding,
            "payload": payload,
        }

    ##########################################
    ########### RESPONSE PARSER ##############
    ##########################################

    @staticmethod
    def _parse_truth_priority(raw: str | None) -> TruthPriority | None:
        try:
            return TruthPriority(raw) if raw else None
        except ValueError:
            return None

    def extract_search_results(self, raw_response: dict) -> list[SearchResult]:
        results: list[SearchResult] = []
        for hit in raw_response.get("result") or []:
            payload = hit.get("payload") or {}
            # float noise can push a cosine score marginally outside [0, 1]
            similarity = min(max(float(hit.get("score", 0.0)), 0.0), 1.0)
            results.append(
                SearchResult(
                    id=str(payload.get("chunk_id") or hit.get("id")),
                    document_id=str(payload.get("document_id", "")),
                    content=payload.get("content") or "",
                    chunk_index=payload.get("chunk_index") or 0,
                    section_title=payload.get("section_title"),
                    truth_priority=self._parse_truth_priority(payload.get("truth_priority")),
                    token_count=payload.get("token_count") or 0,
                    similarity=similarity,
                    file_name=payload.get("file_name") or "",
                    file_path=payload.get("file_path"),
                    drive_file_id=payload.get("drive_file_id"),
                    source_url=payload.get("source_url"),
                    summary=payload.get("summary"),
                )
            )
        return results
