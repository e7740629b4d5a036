from .base_client import AWSBaseClient


class SNSClient(AWSBaseClient):
    def __init__(self, **kwargs):
        super().__init__("sns", **kwargs)

    def publish(self, topic_arn, message, attributes=None):
        kwargs = {"TopicArn": topic_arn, "Message": message}
        if attributes:
            # String attributes only; used as subscription filter keys
            kwargs["MessageAttributes"] = {
                name: {"DataType": "String", "StringValue": str(value)}
                for name, value in attributes.items()
            }
        return self.client.publish(**kwargs)
