import hashlib
import logging
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from harvester.exceptions import PublishError
from harvester.models.harvest.dto import EnrichedMessage
from harvester.services.publisher.publisher import Publisher

logger = logging.getLogger(__name__)


def create_sqs_client(
    region: str,
    endpoint_url: str | None = None,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
) -> Any:
    """
    Creates a boto3 SQS client. Static credentials are only used when given, which is the
    case for LocalStack; otherwise boto3 resolves them from the environment.
    """
    kwargs: dict[str, Any] = {"region_name": region}
    if endpoint_url:
        kwargs["endpoint_url"] = endpoint_url
    if access_key_id and secret_access_key:
        kwargs["aws_access_key_id"] = access_key_id
        kwargs["aws_secret_access_key"] = secret_access_key

    return boto3.client("sqs", **kwargs)


class SqsPublisher(Publisher):
    def __init__(
        self,
        client: Any,
        queue_url: str,
        content_based_deduplication: bool = True,
    ) -> None:
        self.__client = client
        self.__queue_url = queue_url
        self.__content_based_deduplication = content_based_deduplication

    def publish(self, message: EnrichedMessage, group_key: str) -> None:
        body = message.to_json()
        params: dict[str, Any] = {
            "QueueUrl": self.__queue_url,
            "MessageBody": body,
            "MessageGroupId": group_key,
        }
        if not self.__content_based_deduplication:
            params["MessageDeduplicationId"] = hashlib.sha256(body.encode("utf-8")).hexdigest()

        logger.info("Sending message to SQS for group %s", group_key)
        try:
            response = self.__client.send_message(**params)
        except (BotoCoreError, ClientError) as e:
            raise PublishError(f"Failed to send message to SQS: {e}") from e

        logger.info(
            "Message %s sent to SQS for group %s",
            response.get("MessageId") if isinstance(response, dict) else None,
            group_key,
        )
