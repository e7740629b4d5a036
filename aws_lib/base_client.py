import boto3

from aws_config import AWS_ENDPOINT_URL, AWS_REGION, boto3_config


class AWSBaseClient:
    """
    Base AWS client that creates a NEW boto3 session every time
    to avoid expired temporary credentials.
    """

    def __init__(self, service_name, region_name=AWS_REGION, endpoint_url=AWS_ENDPOINT_URL):
        self.service_name = service_name
        self.region_name = region_name
        self.endpoint_url = endpoint_url

    @property
    def client(self):
        # ALWAYS returns a fresh client with fresh credentials
        session = boto3.Session()
        return session.client(
            self.service_name,
            region_name=self.region_name,
            endpoint_url=self.endpoint_url,
            config=boto3_config,
        )

    @property
    def resource(self):
        # ALWAYS returns a fresh resource with fresh credentials
        session = boto3.Session()
        return session.resource(
            self.service_name,
            region_name=self.region_name,
            endpoint_url=self.endpoint_url,
            config=boto3_config,
        )
