from typing import Callable, Iterator


def paginate(operation: Callable[..., dict], **kwargs) -> Iterator[dict]:
    """Yield every item of a DynamoDB query or scan, following LastEvaluatedKey."""
    resp = operation(**kwargs)
    yield from resp.get("Items", [])
    while "LastEvaluatedKey" in resp:
        resp = operation(**kwargs, ExclusiveStartKey=resp["LastEvaluatedKey"])
        yield from resp.get("Items", [])
