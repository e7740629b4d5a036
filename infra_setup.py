# infra_setup.py
import json
import logging

from aws_config import (
    DEFAULT_QUEUE_NAME,
    DEFAULT_SNS_TOPIC_NAME,
    EXPENSES_TABLE,
    ORDERS_TABLE,
    VERSIONS_TABLE,
    dynamodb_resource,
    sns_client,
    sqs_client,
)

logger = logging.getLogger(__name__)

# Table name → partition key
TABLES = {
    ORDERS_TABLE: "order_id",
    EXPENSES_TABLE: "expense_id",
    VERSIONS_TABLE: "scope",
}


# --- DynamoDB Tables ---
def create_table(table_name, partition_key):
    """Create a DynamoDB table if it doesn't exist."""
    ddb = dynamodb_resource()
    existing = ddb.meta.client.list_tables().get("TableNames", [])
    if table_name in existing:
        logger.info("Table '%s' already exists.", table_name)
        return ddb.Table(table_name)

    table = ddb.create_table(
        TableName=table_name,
        AttributeDefinitions=[{"AttributeName": partition_key, "AttributeType": "S"}],
        KeySchema=[{"AttributeName": partition_key, "KeyType": "HASH"}],
        BillingMode="PAY_PER_REQUEST"
    )
    table.wait_until_exists()
    logger.info("Created table '%s' successfully.", table_name)
    return table


# --- SQS Queue ---
def create_queue(queue_name):
    resp = sqs_client().create_queue(QueueName=queue_name)
    logger.info("Created queue '%s': %s", queue_name, resp["QueueUrl"])
    return resp["QueueUrl"]


# --- SNS Topic ---
def create_topic(topic_name):
    resp = sns_client().create_topic(Name=topic_name)
    logger.info("Created SNS topic '%s': %s", topic_name, resp["TopicArn"])
    return resp["TopicArn"]


# --- Topic → Queue subscription ---
def subscribe_queue(topic_arn, queue_url):
    """
    Deliver every change event published on the topic to the queue.
    Raw delivery keeps the SQS body equal to the published JSON.
    """
    sqs = sqs_client()
    queue_arn = sqs.get_queue_attributes(
        QueueUrl=queue_url, AttributeNames=["QueueArn"]
    )["Attributes"]["QueueArn"]

    policy = {
        "Version": "2012-10-17",
        "Statement": [{
            "Effect": "Allow",
            "Principal": {"Service": "sns.amazonaws.com"},
            "Action": "sqs:SendMessage",
            "Resource": queue_arn,
            "Condition": {"ArnEquals": {"aws:SourceArn": topic_arn}},
        }],
    }
    sqs.set_queue_attributes(QueueUrl=queue_url, Attributes={"Policy": json.dumps(policy)})

    resp = sns_client().subscribe(
        TopicArn=topic_arn,
        Protocol="sqs",
        Endpoint=queue_arn,
        Attributes={"RawMessageDelivery": "true"},
        ReturnSubscriptionArn=True,
    )
    logger.info("Subscribed queue %s to %s", queue_arn, topic_arn)
    return resp["SubscriptionArn"]


def setup_all():
    for table_name, key in TABLES.items():
        create_table(table_name, key)

    queue_url = create_queue(DEFAULT_QUEUE_NAME)
    topic_arn = create_topic(DEFAULT_SNS_TOPIC_NAME)
    subscribe_queue(topic_arn, queue_url)
    return {"queue_url": queue_url, "topic_arn": topic_arn, "tables": list(TABLES)}


# --- Main setup ---
if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    result = setup_all()

    logger.info("Infrastructure setup completed successfully.")
    logger.info("Changes Queue URL: %s", result["queue_url"])
    logger.info("SNS Topic ARN: %s", result["topic_arn"])
