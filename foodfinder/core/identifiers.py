from typing import NewType, Union

StoreId = NewType("StoreId", str)


def normalize_store_id(value: Union[str, int, None]) -> StoreId:
    """
    Normalize a store identifier to its canonical string form.

    Stores are keyed by strings, but callers hand over ints from bot
    commands and strings from stored records. Everything below the service
    layer only ever sees a StoreId.

    Args:
        value: Raw identifier (str, int or None)

    Returns:
        StoreId: Normalized identifier, empty when value is None
    """
    if value is None:
        return StoreId("")
    if isinstance(value, bool):
        raise TypeError("Store id cannot be a boolean")
    return StoreId(str(value))
