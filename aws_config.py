# aws_config.py
import os

import boto3
from botocore.config import Config

# -----------------------------
# AWS region & boto3 config
# -----------------------------
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")

# Set to a local DynamoDB / localstack URL for development
AWS_ENDPOINT_URL = os.getenv("AWS_ENDPOINT_URL") or None

boto3_config = Config(
    region_name=AWS_REGION,
    retries={"max_attempts": 3, "mode": "standard"}
)

# -----------------------------
# Table, topic & queue names
# -----------------------------
ORDERS_TABLE = os.getenv("DDB_ORDERS_TABLE", "Orders")
EXPENSES_TABLE = os.getenv("DDB_EXPENSES_TABLE", "Expenses")

# Change-feed version counters shared by every process
VERSIONS_TABLE = os.getenv("DDB_VERSIONS_TABLE", "FeedVersions")

DEFAULT_QUEUE_NAME = os.getenv("SQS_CHANGES_QUEUE_NAME", "laundry-changes-queue")
DEFAULT_SNS_TOPIC_NAME = os.getenv("SNS_CHANGES_TOPIC_NAME", "laundry-changes")


# -----------------------------
# AWS clients/resources
# -----------------------------
def dynamodb_resource():
    return boto3.resource("dynamodb", region_name=AWS_REGION, endpoint_url=AWS_ENDPOINT_URL, config=boto3_config)

def sqs_client():
    return boto3.client("sqs", region_name=AWS_REGION, endpoint_url=AWS_ENDPOINT_URL, config=boto3_config)

def sns_client():
    return boto3.client("sns", region_name=AWS_REGION, endpoint_url=AWS_ENDPOINT_URL, config=boto3_config)


# -----------------------------
# SQS & SNS lookup
# -----------------------------
def get_sqs_url(queue_name=DEFAULT_QUEUE_NAME):
    sqs = sqs_client()
    try:
        resp = sqs.get_queue_url(QueueName=queue_name)
        return resp["QueueUrl"]
    except sqs.exceptions.QueueDoesNotExist:
        # Queue does not exist → create it
        resp = sqs.create_queue(
            QueueName=queue_name,
            Attributes={
                "DelaySeconds": "0",
                "MessageRetentionPeriod": "86400"  # 1 day
            }
        )
        return resp["QueueUrl"]


def get_sns_topic_arn(topic_name=DEFAULT_SNS_TOPIC_NAME):
    """
    Return the ARN of the change-feed topic, creating it when missing.
    Walks every page of list_topics before deciding the topic is absent.
    """
    sns = sns_client()
    next_token = None
    while True:
        if next_token:
            response = sns.list_topics(NextToken=next_token)
        else:
            response = sns.list_topics()

        for topic in response.get("Topics", []):
            if topic["TopicArn"].split(":")[-1] == topic_name:
                return topic["TopicArn"]

        next_token = response.get("NextToken")
        if not next_token:
            break

    # Topic does not exist → create it
    resp = sns.create_topic(Name=topic_name)
    return resp["TopicArn"]
