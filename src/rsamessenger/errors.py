"""Exceptions raised throughout RSA Messenger.

Every exception derives from the closest builtin, so callers may catch either the specific class or the general one.
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0


class InvalidKeySize(ValueError):
    """Requested bit length is not positive or not divisible by 8."""


class MalformedKeyEncoding(ValueError):
    """A key or key document could not be decoded."""


class DirectoryError(IOError):
    """The remote key/message directory could not be reached or rejected the request."""


class KeyNotFound(FileNotFoundError):
    """The requested key file does not exist locally."""


class IdentityNotAuthorized(PermissionError):
    """The local private key is not registered for the requested identity."""
