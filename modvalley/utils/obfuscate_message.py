"""
This module is to be used with loguru to remove potentially sensitive information such as the user's name
or a Nexus Mods API key.
"""

import re


def obfuscate_message(
    message: str, anonymize_path: bool = True, mask_api_key: bool = True
) -> str:
    """
    Obfuscate the message such that it does not reveal user information.

    The message may contain a path, in which case the path will be anonymized.
    It may also contain an API key sent as a header or a query parameter.

    Args:
        message: The message to obfuscate.
        anonymize_path: Whether to anonymize the path in the message.
        mask_api_key: Whether to mask API keys in the message.

    Returns:
        The obfuscated message.
    """
    if anonymize_path:
        message = _anonymize_path(message)
    if mask_api_key:
        message = _mask_api_key(message)

    return message


def _anonymize_path(message: str) -> str:
    """
    Anonymize the path in the message such that
    it does not reveal user information such as usernames.

    The input message may or may not contain a path at all.

    OS agnostic.
    """
    # Windows - Only remove the username, keep the drive letter
    message = re.sub(r"([A-Z]:\\Users\\)[^\\]+\\", r"\1...\\", message)
    # Linux - Only remove the username
    message = re.sub(r"/home/[^/]+/", r"/home/.../", message)
    # macOS
    message = re.sub(r"/Users/[^/]+/", r"/Users/.../", message)

    return message


def _mask_api_key(message: str) -> str:
    """
    Mask the value of an apikey header or query parameter.
    """
    # 'apikey': 'value' (dict repr of request headers)
    message = re.sub(
        r"(['\"]apikey['\"]\s*:\s*['\"])[^'\"]+(['\"])",
        r"\1***\2",
        message,
        flags=re.IGNORECASE,
    )
    # apikey=value or &key=value in urls
    message = re.sub(r"([?&](?:api)?key=)[^&\s]+", r"\1***", message)

    return message
