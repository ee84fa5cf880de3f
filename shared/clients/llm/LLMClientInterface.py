from abc import abstractmethod

import httpx
from shared.clients.ClientInterface import ClientInterface, ClientRequestError
from shared.helper.HelperConfig import HelperConfig


class LLMProviderError(ClientRequestError):
    """Uniform error raised by every text-generation backend.

    Carries the engine name next to the status code and response body of the
    failed call, so callers never need to know which backend was configured.
    """

    def __init__(self, engine: str, message: str, url: str = "", status_code: int | None = None, body: str = "") -> None:
        super().__init__(message, url=url, status_code=status_code, body=body)
        self.engine = engine


class LLMClientInterface(ClientInterface):
    def __init__(self, helper_config: HelperConfig):
        super().__init__(helper_config=helper_config)

        # chat / completion config
        self.chat_model = helper_config.get_string_val(f"{self.get_client_type().upper()}_CHAT_MODEL", default=self._get_default_chat_model())
        self.max_tokens = int(helper_config.get_number_val(f"{self.get_client_type().upper()}_MAX_TOKENS", default=2048))
        self.temperature = float(helper_config.get_number_val(f"{self.get_client_type().upper()}_TEMPERATURE", default=0.3))

    ##########################################
    ################ GETTER ##################
    ##########################################

    ################ GENERAL ##################
    def _get_client_type(self) -> str:
        return "llm"

    @abstractmethod
    def _get_default_chat_model(self) -> str:
        """Returns the chat model used when LLM_CHAT_MODEL is not set."""
        pass

    ################ ENDPOINTS ##################
    @abstractmethod
    def _get_endpoint_chat(self) -> str:
        """Returns the endpoint path for chat/completion requests (e.g. "/v1/messages")."""
        pass

    ################ PAYLOAD BUILDER ##################
    @abstractmethod
    def get_chat_payload(self, system_prompt: str, user_prompt: str) -> dict:
        """Build the backend-specific request body for a chat/completion request.

        Args:
            system_prompt (str): Instructions constraining the model.
            user_prompt (str): The per-call message.

        Returns:
            dict: JSON-serialisable request body.
        """
        pass

    ##########################################
    ################# OTHER ##################
    ##########################################

    @abstractmethod
    def extract_chat_response(self, response_data: dict) -> str:
        """Extract the assistant reply text from a raw chat API response.

        Args:
            response_data (dict): The parsed JSON response body.

        Returns:
            str: The assistant reply text, "" when the backend returned no content.
        """
        pass

    ##########################################
    ############### REQUESTS #################
    ##########################################

    async def do_complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat/completion request and return the raw assistant text.

        No retries are attempted.

        Args:
            system_prompt (str): Instructions constraining the model.
            user_prompt (str): The per-call message.

        Returns:
            str: The raw assistant reply.

        Raises:
            LLMProviderError: On any non-2xx status, transport failure or unreadable reply body.
        """
        body = self.get_chat_payload(system_prompt, user_prompt)
        engine = self.get_engine_name()
        try:
            response = await self.do_request(
                method="POST",
                endpoint=self._get_endpoint_chat(),
                json=body,
            )
        except httpx.HTTPError as e:
            self.logging.error("LLM request to %s failed: %s", engine, e)
            raise LLMProviderError(engine, f"{engine} request failed: {e}", body=str(e)) from e

        if not response.is_success:
            self.logging.error(
                "LLM request to %s failed with status %d: %s",
                engine,
                response.status_code,
                response.text[:500],
            )
            raise LLMProviderError(
                engine,
                f"{engine} API error ({response.status_code}): {response.text}",
                url=str(response.request.url),
                status_code=response.status_code,
                body=response.text,
            )
        try:
            return self.extract_chat_response(response.json())
        except (ValueError, AttributeError, TypeError) as e:
            # 2xx with a body that is not the backend's chat format (e.g. a proxy error page)
            self.logging.error("LLM response from %s could not be read: %s", engine, e)
            raise LLMProviderError(
                engine,
                f"{engine} returned an unreadable response: {e}",
                url=str(response.request.url),
                status_code=response.status_code,
                body=response.text,
            ) from e
