"""
modelcall config commands - Create, display and edit the config file.
"""

import json

import yaml
from pydantic import ValidationError

from modelcall.config import ConfigManager, ModelcallConfig, get_config_root, reload_config


def cmd_config_init(args) -> int:
    """Write a config file seeded with default providers."""
    manager = ConfigManager(get_config_root())

    if manager.exists() and not args.force:
        print(f"✗ Config already exists at: {manager.config_path}")
        print("  Use --force to overwrite")
        return 1

    config = ModelcallConfig.with_defaults()
    manager.save(config)
    print(f"✓ Created config at: {manager.config_path}")

    print("\nAPI keys:")
    for key_name, value in config.api_keys.items():
        if config.resolve_api_key(key_name):
            print(f"  ✓ {key_name}: configured")
        else:
            print(f"  ○ {key_name}: not set (using {value})")

    print(f"\nDefault provider: {config.defaults.provider}")
    return 0


def cmd_config_show(args) -> int:
    """Show the config file (keys masked unless --reveal-keys)."""
    manager = ConfigManager(get_config_root())

    if not manager.exists():
        print(f"✗ No config found at: {manager.config_path}")
        print("  Run 'modelcall config init' to create one")
        return 1

    config = manager.load()

    if args.json:
        data = config.model_dump()
        data['api_keys'] = {
            k: (config.resolve_api_key(k) if args.reveal_keys else _mask_key(config.resolve_api_key(k)))
            for k in data['api_keys']
        }
        print(json.dumps(data, indent=2, default=str))
        return 0

    print(f"\n📋 modelcall Configuration")
    print(f"   Path: {manager.config_path}\n")

    print("API Keys:")
    for key_name in config.api_keys:
        resolved = config.resolve_api_key(key_name)
        if args.reveal_keys:
            display = resolved or "(not set)"
        else:
            display = _mask_key(resolved)
        print(f"  {key_name}: {display}")

    print("\nProviders:")
    for name, provider in config.providers.items():
        marker = "✓" if name == config.defaults.provider else "○"
        endpoint = f" endpoint={provider.endpoint}" if provider.endpoint else ""
        print(f"  {marker} {name}: type={provider.type} model={provider.model}{endpoint}")

    print("\nDefaults:")
    print(f"  provider: {config.defaults.provider}")
    print(f"  timeout_seconds: {config.defaults.timeout_seconds}")
    print(f"  max_retries: {config.defaults.max_retries}")
    print()
    return 0


def _mask_key(value: str) -> str:
    """Mask an API key for display."""
    if not value:
        return "(not set)"
    if len(value) <= 8:
        return "****"
    return value[:4] + "..." + value[-4:]


def cmd_config_set(args) -> int:
    """Set a nested value, e.g. `modelcall config set defaults.max_retries 5`."""
    manager = ConfigManager(get_config_root())

    if not manager.exists():
        print(f"✗ No config found at: {manager.config_path}")
        print("  Run 'modelcall config init' to create one")
        return 1

    parts = args.key.split('.')
    if len(parts) == 1:
        print(f"✗ Cannot set top-level key '{args.key}' directly")
        print("  Use nested keys like 'defaults.max_retries' or 'api_keys.openai'")
        return 1

    # YAML scalars: 5 -> int, 0.5 -> float, true -> bool, anything else stays a string
    value = yaml.safe_load(args.value)
    updates = value
    for part in reversed(parts):
        updates = {part: updates}

    try:
        manager.update(updates)
    except ValidationError as e:
        print(f"✗ Invalid value for {args.key}: {e.errors()[0]['msg']}")
        return 1

    reload_config()
    print(f"✓ Set {args.key} = {value}")
    return 0


def cmd_config_use(args) -> int:
    """Make a configured provider the default."""
    manager = ConfigManager(get_config_root())

    try:
        manager.set_default_provider(args.name)
    except KeyError:
        configured = ', '.join(sorted(manager.load().providers))
        print(f"✗ Unknown provider '{args.name}'. Configured providers: {configured}")
        return 1

    reload_config()
    print(f"✓ Default provider: {args.name}")
    return 0
