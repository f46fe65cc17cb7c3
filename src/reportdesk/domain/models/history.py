"""Free-form status history metadata: string keys, scalar values only."""

from typing import Union

MetadataValue = Union[str, int, float, bool, None]
Metadata = dict[str, MetadataValue]
