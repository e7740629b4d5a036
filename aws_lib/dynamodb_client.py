from decimal import Decimal

from .base_client import AWSBaseClient


class DynamoDBClient(AWSBaseClient):
    def __init__(self, **kwargs):
        super().__init__("dynamodb", **kwargs)

    def _deserialize(self, value):
        """Convert DynamoDB data into plain Python types (money stays Decimal)."""
        if isinstance(value, dict):
            return {k: self._deserialize(v) for k, v in value.items()}
        if isinstance(value, list):
            return [self._deserialize(v) for v in value]
        if isinstance(value, Decimal):
            return int(value) if value % 1 == 0 else value
        return value

# CRUD

    def put(self, table, item, condition=None):
        tbl = self.resource.Table(table)
        clean_item = self._convert_to_decimal(item)
        if condition is not None:
            return tbl.put_item(Item=clean_item, ConditionExpression=condition)
        return tbl.put_item(Item=clean_item)

    def get(self, table, key):
        tbl = self.resource.Table(table)
        resp = tbl.get_item(Key=key)
        item = resp.get("Item")
        return self._deserialize(item) if item else {}

    def scan(self, table, filter_expression=None):
        """Read every page of a table scan, optionally filtered."""
        tbl = self.resource.Table(table)
        kwargs = {}
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items = []
        while True:
            resp = tbl.scan(**kwargs)
            items.extend(resp.get("Items", []))
            last_key = resp.get("LastEvaluatedKey")
            if not last_key:
                break
            kwargs["ExclusiveStartKey"] = last_key
        return [self._deserialize(i) for i in items]

    def update(self, table, key, values, condition=None):
        """
        SET the given attributes on one item and return the item as stored
        after the update.
        """
        tbl = self.resource.Table(table)
        names = {f"#fld{i}": field for i, field in enumerate(values)}
        attr_values = {
            f":val{i}": self._convert_to_decimal(value)
            for i, value in enumerate(values.values())
        }
        assignments = ", ".join(f"#fld{i} = :val{i}" for i in range(len(values)))

        kwargs = {
            "Key": key,
            "UpdateExpression": f"SET {assignments}",
            "ExpressionAttributeNames": names,
            "ExpressionAttributeValues": attr_values,
            "ReturnValues": "ALL_NEW",
        }
        if condition is not None:
            kwargs["ConditionExpression"] = condition
        resp = tbl.update_item(**kwargs)
        return self._deserialize(resp.get("Attributes", {}))

    def increment(self, table, key, field, amount=1):
        """Atomic ADD on a numeric attribute; creates the item when missing."""
        tbl = self.resource.Table(table)
        resp = tbl.update_item(
            Key=key,
            UpdateExpression="ADD #fld :amt",
            ExpressionAttributeNames={"#fld": field},
            ExpressionAttributeValues={":amt": Decimal(amount)},
            ReturnValues="UPDATED_NEW",
        )
        return self._deserialize(resp.get("Attributes", {})).get(field, 0)

# int/float to decimal
    def _convert_to_decimal(self, data):
        """Recursively convert numbers to Decimal for DynamoDB writes."""
        if isinstance(data, dict):
            return {k: self._convert_to_decimal(v) for k, v in data.items()}
        if isinstance(data, list):
            return [self._convert_to_decimal(v) for v in data]
        if isinstance(data, bool):
            return data
        if isinstance(data, int):
            return Decimal(data)
        if isinstance(data, float):
            return Decimal(str(data))
        return data

    def delete(self, table, key):
        """
        Delete an item from the DynamoDB table.
        """
        tbl = self.resource.Table(table)
        return tbl.delete_item(Key=key)
