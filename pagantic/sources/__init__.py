from .dynamo import DynamoTableSource
from .memory import SequenceSource

__all__ = ["DynamoTableSource", "SequenceSource"]
