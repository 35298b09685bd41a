"""Greengrass naming conventions for things, policies and hosts."""

DEFAULT_CORE_SUB_NAME = "core"
DEFAULT_DEVICE_PREFIX = "GGD_"


def core_thing_name(group_name: str) -> str:
    return f"{group_name}_Core"


def core_policy_name(group_name: str) -> str:
    return f"{group_name}_Core_Policy"


def device_shadow_topic_filter(device_thing_name: str) -> str:
    return f"$aws/things/{device_thing_name}/shadow/#"


def greengrass_host(region: str) -> str:
    return f"greengrass.iot.{region}.amazonaws.com"


def trim_device_prefix(sub_name: str, prefix: str = DEFAULT_DEVICE_PREFIX) -> str:
    """Strip the reserved device prefix (only once, only at the start)."""
    if prefix and sub_name.startswith(prefix):
        return sub_name[len(prefix):]
    return sub_name


def device_file_name(
    group_id: str,
    sub_name: str,
    core_sub_name: str = DEFAULT_CORE_SUB_NAME,
    prefix: str = DEFAULT_DEVICE_PREFIX,
) -> str:
    """
    Name used for the key/certificate files of an identity.

    The core is named after its group; devices use their sub-name with the
    reserved prefix removed.
    """
    if sub_name == core_sub_name:
        return group_id
    return trim_device_prefix(sub_name, prefix)
