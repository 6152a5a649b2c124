"""AWS Bedrock client wrapper for the text and vision model calls."""

import logging
import os
from typing import Dict, List, Optional, Any

import boto3
from botocore.config import Config as BotocoreConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import BedrockConfig
from .errors import BedrockAPIError, ErrorType, ErrorContext

logger = logging.getLogger(__name__)


class BedrockClient:
    """
    Wrapper for the AWS Bedrock Runtime client.

    Sends Converse API requests to the configured endpoint and model.
    Calls are made once: botocore retries are disabled and failures are
    raised as BedrockAPIError for the caller to translate.
    """

    def __init__(self, config: BedrockConfig, runtime: Any = None):
        """
        Initialize Bedrock client.

        Args:
            config: Model service settings (endpoint, model, API key, timeout)
            runtime: Optional pre-built bedrock-runtime client
        """
        self.model_id = config.model_id
        self.max_tokens = config.max_tokens
        self.temperature = config.temperature

        if runtime is None:
            # botocore picks the API key up from this variable for bearer auth
            if not os.getenv("AWS_BEARER_TOKEN_BEDROCK"):
                os.environ["AWS_BEARER_TOKEN_BEDROCK"] = config.api_key

            botocore_config = BotocoreConfig(
                region_name=config.region,
                connect_timeout=config.timeout,
                read_timeout=config.timeout,
                retries={"max_attempts": 0},
                signature_version="bearer",
            )
            runtime = boto3.client(
                "bedrock-runtime",
                endpoint_url=config.endpoint_url,
                config=botocore_config,
            )

        self.runtime = runtime

        logger.info(
            f"Initialized BedrockClient: endpoint={config.endpoint_url}, "
            f"model={config.model_id}, region={config.region}"
        )

    def converse(
        self,
        messages: List[Dict[str, Any]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        system_prompts: Optional[List[Dict[str, Any]]] = None,
        operation: str = "converse"
    ) -> Dict[str, Any]:
        """
        Invoke the configured model via the Converse API.

        Args:
            messages: List of message dicts with 'role' and 'content'
            temperature: Sampling temperature (defaults to configured value)
            max_tokens: Maximum tokens to generate (defaults to configured value)
            system_prompts: Optional system prompts
            operation: Name of the calling operation, used in errors

        Returns:
            Dict containing 'text', 'content', 'stop_reason', 'usage'

        Raises:
            BedrockAPIError: If the call fails for any reason
        """
        params = {
            "modelId": self.model_id,
            "messages": messages,
            "inferenceConfig": {
                "temperature": self.temperature if temperature is None else temperature,
                "maxTokens": max_tokens or self.max_tokens
            }
        }

        if system_prompts:
            params["system"] = system_prompts

        try:
            logger.debug(f"Invoking {self.model_id} for {operation}")
            response = self.runtime.converse(**params)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            logger.error(f"Bedrock API call failed during {operation}: code={error_code}")
            raise BedrockAPIError.from_client_error(error=e, operation=operation) from e
        except BotoCoreError as e:
            logger.error(f"Bedrock transport error during {operation}: {str(e)}")
            raise BedrockAPIError(
                ErrorContext(
                    error_type=ErrorType.BEDROCK_SERVICE_ERROR,
                    message=f"Bedrock transport error during {operation}: {str(e)}",
                    details={"operation": operation},
                    original_exception=e
                )
            ) from e

        logger.info(
            f"{operation} successful: "
            f"stop_reason={response.get('stopReason')}, "
            f"usage={response.get('usage')}"
        )

        return self._parse_converse_response(response)

    def _parse_converse_response(self, response: Dict[str, Any]) -> Dict[str, Any]:
        """
        Parse Converse API response into a simplified format.

        Args:
            response: Raw response from Converse API

        Returns:
            Parsed response dict with 'text', 'content', 'stop_reason', 'usage'
        """
        output = response.get("output", {})
        message = output.get("message", {})

        parsed = {
            "content": message.get("content", []),
            "role": message.get("role", "assistant"),
            "stop_reason": response.get("stopReason", "unknown"),
            "usage": response.get("usage", {})
        }

        text_parts = [block["text"] for block in parsed["content"] if "text" in block]
        parsed["text"] = "\n".join(text_parts)

        return parsed
