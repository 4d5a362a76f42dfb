"""The Command Line Interface for the messenger, including Interactive elements.

A hybrid CLI/ICLI that asks for whatever the command line left out, unless told to stay non-interactive.

Typical usage example:

    rsamessenger keyGen 1024
    rsamessenger sendKey me@example.com
    rsamessenger getKey you@example.com
    rsamessenger sendMsg you@example.com "Hi there!"
    rsamessenger getMsg me@example.com
    OR
    python -m rsamessenger
"""
# Copyright (c) 2025-present Tech. TTGames
# SPDX-License-Identifier: EPL-2.0
import argparse
import logging
import pathlib
import sys
import typing

import rsamessenger
from rsamessenger.client import DEFAULT_SERVER
from rsamessenger.client import DirectoryClient
from rsamessenger.errors import DirectoryError
from rsamessenger.errors import IdentityNotAuthorized
from rsamessenger.errors import KeyNotFound
from rsamessenger.messenger import Messenger
from rsamessenger.store import KeyStore


class HelpData(typing.NamedTuple):
    description: str
    format: typing.Type = str
    choices: list[str] | None = None
    default: typing.Any = None


help_dict: dict[str, HelpData] = {
    "subcommand":
        HelpData(
            description="The available subcommands in RSA Messenger.",
            choices=["keyGen", "sendKey", "getKey", "sendMsg", "getMsg"],
        ),
    "keyGen":
        HelpData("Generate a key pair and store it locally in public.key and private.key. "
                 "It is not associated with an email address until sent to the server."),
    "sendKey":
        HelpData("Send the public key to the server and register the email address as a valid receiver. "
                 "Also registers the email address locally as one whose messages can be decoded."),
    "getKey":
        HelpData("Retrieve the public key of a particular user and store it as <email>.key."),
    "sendMsg":
        HelpData("Encrypt a message for a user and send it to the server."),
    "getMsg":
        HelpData("Retrieve the message of a particular user and decode it if possible."),
    "keysize":
        HelpData(
            description="Key size (in bits). The halves must be divisible by 8.",
            format=int,
            default=1024,
        ),
    "email":
        HelpData(description="Email address of the user."),
    "plaintext":
        HelpData(description="Message to send."),
}

needs = {
    "keyGen": ("keysize",),
    "sendKey": ("email",),
    "getKey": ("email",),
    "sendMsg": ("email", "plaintext"),
    "getMsg": ("email",),
}

email = argparse.ArgumentParser(add_help=False)
email.add_argument("email", nargs="?", type=help_dict["email"].format, help=help_dict["email"].description)
corep = argparse.ArgumentParser(prog="rsamessenger")
corep.add_argument("--version", "-v", action="version", version=f"%(prog)s {rsamessenger.__version__}")
corep.add_argument("--non-interactive", "-n", action="store_true", help="Enable non-interactive mode")
corep.add_argument("--server", "-s", default=DEFAULT_SERVER, help="Base URL of the key/message directory")
corep.add_argument("--keys-dir", "-k", type=pathlib.Path, default=pathlib.Path("."), help="Directory of key files")
corep.add_argument("--encoding", "-e", choices=["utf-8", "utf-16", "ascii"], default="utf-8", help="Payload encoding")
corep.add_argument("--workers", "-w", type=int, default=None, help="Concurrent search tasks per prime")
corep.add_argument("--log-level", default="WARNING", help="Logging verbosity (DEBUG, INFO, WARNING, ...)")
commands = corep.add_subparsers(dest="subcommand", title="Subcommands")

keygen = commands.add_parser("keyGen", help=help_dict["keyGen"].description)
keygen.add_argument("keysize", nargs="?", type=help_dict["keysize"].format, help=help_dict["keysize"].description)
commands.add_parser("sendKey", parents=[email], help=help_dict["sendKey"].description)
commands.add_parser("getKey", parents=[email], help=help_dict["getKey"].description)
sendmsg = commands.add_parser("sendMsg", parents=[email], help=help_dict["sendMsg"].description)
sendmsg.add_argument("plaintext", nargs="?", help=help_dict["plaintext"].description)
commands.add_parser("getMsg", parents=[email], help=help_dict["getMsg"].description)


def checkmodes(arg: str, non_interactive: bool):
    helper_data = help_dict[arg]
    if non_interactive and helper_data.default is not None:
        return helper_data.default
    if non_interactive:
        raise IOError(f"Argument {arg} is missing and non-interactive mode is active.")
    return helper_data


def choice_handler(arg: str, non_interactive: bool, prntr: typing.Callable = print):
    helper_data = checkmodes(arg, non_interactive)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    for choice in helper_data.choices:
        defstring = " (Default)" if choice == helper_data.default else ""
        if help_dict.get(choice, None):
            prntr(f"{choice} - {help_dict[choice].description}" + defstring)
        else:
            prntr(f"{choice}" + defstring)
    while True:
        ch = input(f"{arg}: ")
        if ch in helper_data.choices:
            return ch
        if not ch and helper_data.default is not None:
            return helper_data.default
        prntr("Please select an option from the list.")


def input_handler(arg: str, non_interactive: bool, prntr: typing.Callable = print):
    helper_data = checkmodes(arg, non_interactive)
    if not isinstance(helper_data, HelpData):
        return helper_data
    prntr(f"Please specify the {arg}!")
    prntr("Description: " + helper_data.description)
    if helper_data.default is not None:
        prntr(f"Default value: {helper_data.default}")
        prntr("To accept default just click enter. Otherwise specify value.")
    cls = helper_data.format
    while True:
        ch = input(f"{arg}: ")
        if not ch and helper_data.default is not None:
            return helper_data.default
        if ch == "":
            prntr("Please provide a value.")
            continue
        try:
            return cls(ch)
        except ValueError:
            prntr(f"We could not convert your value to {cls.__name__}.")


def main(argv: list[str] | None = None) -> int:
    """Core Hybrid CLI/ICLI (Command Line Interface/Interactive Command Line Interface)"""
    args = corep.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="[%(asctime)s] %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    def pspr(text: str):
        """Print only if not in non-interactive mode."""
        if not args.non_interactive:
            print(text)

    try:
        if not args.subcommand:
            args.subcommand = choice_handler("subcommand", args.non_interactive)
        for reqs in needs[args.subcommand]:
            if getattr(args, reqs, None) is None:
                setattr(args, reqs, input_handler(reqs, args.non_interactive))
        app = Messenger(KeyStore(args.keys_dir), DirectoryClient(args.server), args.encoding, args.workers)
        match args.subcommand:
            case "keyGen":
                app.key_gen(args.keysize)
                pspr("Key pair generated!")
            case "sendKey":
                app.send_key(args.email)
                print("Key saved")
            case "getKey":
                app.get_key(args.email)
                pspr(f"Key for {args.email} saved")
            case "sendMsg":
                app.send_msg(args.email, args.plaintext)
                print("Message written")
            case "getMsg":
                print(app.get_msg(args.email))
    except IdentityNotAuthorized:
        print("Message cannot be decoded.")
        return 1
    except KeyNotFound as exc:
        if args.subcommand == "sendMsg":
            print(f"Key does not exist for {args.email}. Retrieve it with getKey <email>")
        else:
            print(f"{exc} Generate with keyGen <keysize>")
        return 1
    except DirectoryError as exc:
        print(f"Unable to {args.subcommand}: {exc}")
        return 1
    except (ValueError, IOError) as exc:
        print(exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
