"""Projection of a Sample's tags and fields onto Honeycomb field names."""

from collections.abc import Collection

from influx2hny.core.models import FieldValue, Sample

# Always sent unprefixed, whatever the configuration says.
HOST_TAG = "host"


def field_name(sample: Sample, key: str) -> str:
    """Return the prefixed Honeycomb field name for a sample key."""
    return f"{sample.name}.{key}"


def is_unprefixed(tag_key: str, unprefixed_tags: Collection[str] = ()) -> bool:
    """Return True if the tag is sent under its bare key."""
    return tag_key == HOST_TAG or tag_key in unprefixed_tags


def project(
    sample: Sample, unprefixed_tags: Collection[str] = ()
) -> dict[str, FieldValue]:
    """Build the Honeycomb field mapping for a sample.

    Tags are prefixed with the sample name unless they are "host" or listed
    in unprefixed_tags. Fields are always prefixed. A metric like
    ``disk,device=sda free=232827793`` becomes ``disk.device`` and
    ``disk.free``.

    Args:
        sample: The sample to project.
        unprefixed_tags: Tag keys to send without the name prefix.

    Returns:
        Mapping of field name to value. Later keys overwrite earlier ones.
    """
    data: dict[str, FieldValue] = {}
    for key, value in sample.tags:
        name = key if is_unprefixed(key, unprefixed_tags) else field_name(sample, key)
        data[name] = value
    for key, value in sample.fields.items():
        data[field_name(sample, key)] = value
    return data
