#!/usr/bin/env python3
"""
modelcall CLI - Resilient calls to chat completion model APIs

Commands:
    modelcall ask <text>           Send one query and print the answer
    modelcall config init          Create the config file with default providers
    modelcall config show          Show the config file (keys masked)
    modelcall config set KEY VALUE Set a nested config value
    modelcall config use NAME      Make a provider the default
"""

import sys
import argparse
from pathlib import Path

from modelcall.cli.ask import cmd_ask
from modelcall.cli.config_cmd import cmd_config_init, cmd_config_set, cmd_config_show, cmd_config_use


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='modelcall',
        description='modelcall - Resilient calls to chat completion model APIs',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  modelcall config init
  modelcall config use openrouter
  modelcall config set defaults.max_retries 5
  modelcall ask "Summarize the plot of Hamlet in one sentence"
  modelcall ask "Hello" --provider openrouter --model anthropic/claude-3.5-sonnet
  echo "Hello" | modelcall ask - --json
  modelcall ask "Hello" --deadline 10 --async
"""
    )

    subparsers = parser.add_subparsers(dest='command', help='Command to run')
    subparsers.required = True

    # modelcall ask
    ask_parser = subparsers.add_parser('ask', help='Send one query and print the answer')
    ask_parser.add_argument('text', help='Query text ("-" reads stdin)')
    ask_parser.add_argument('--provider', help='Provider name from config (default: defaults.provider)')
    ask_parser.add_argument('--model', help='Model override for this query')
    ask_parser.add_argument('--temperature', type=float, help='Sampling temperature override')
    ask_parser.add_argument('--max-tokens', type=int, help='Max output tokens override')
    ask_parser.add_argument('--timeout', type=float, help='Per-request timeout in seconds')
    ask_parser.add_argument('--retries', type=int, help='Max retries after network failures')
    ask_parser.add_argument('--deadline', type=float, help='Cancel the whole call after this many seconds')
    ask_parser.add_argument('--async', dest='use_async', action='store_true', help='Run the call on a background thread')
    ask_parser.add_argument('--json', action='store_true', help='Print the outcome as JSON')
    ask_parser.add_argument('--log-dir', type=Path, help='Append structured JSONL logs to this directory')
    ask_parser.add_argument('-v', '--verbose', action='store_true', help='Print debug logs to stderr')
    ask_parser.set_defaults(func=cmd_ask)

    # modelcall config
    config_parser = subparsers.add_parser('config', help='Config file commands')
    config_subparsers = config_parser.add_subparsers(dest='config_command')
    config_subparsers.required = True

    init_parser = config_subparsers.add_parser('init', help='Create config file with default providers')
    init_parser.add_argument('--force', action='store_true', help='Overwrite an existing config')
    init_parser.set_defaults(func=cmd_config_init)

    show_parser = config_subparsers.add_parser('show', help='Show config file')
    show_parser.add_argument('--json', action='store_true', help='Output as JSON')
    show_parser.add_argument('--reveal-keys', action='store_true', help='Show API keys unmasked')
    show_parser.set_defaults(func=cmd_config_show)

    set_parser = config_subparsers.add_parser('set', help='Set a config value (e.g. defaults.max_retries 5)')
    set_parser.add_argument('key', help='Dotted key path')
    set_parser.add_argument('value', help='Value (parsed as a YAML scalar)')
    set_parser.set_defaults(func=cmd_config_set)

    use_parser = config_subparsers.add_parser('use', help='Make a configured provider the default')
    use_parser.add_argument('name', help='Provider name')
    use_parser.set_defaults(func=cmd_config_use)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    sys.exit(args.func(args))


if __name__ == '__main__':
    main()
