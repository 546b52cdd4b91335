#!/usr/bin/env python3
"""Configuration setup helper for the Full Stack Deployment Setup.

This script builds config.json (or config.yaml) from config.example.json
by asking for the values every project has to change.
"""

import json
import sys
from pathlib import Path
from typing import Dict, Any, List
import yaml


def display_banner():
    """Display setup banner."""
    print("""
╔══════════════════════════════════════════════════════════════╗
║             Full Stack Deployment Configuration              ║
║                                                              ║
║        Create config.json from config.example.json           ║
╚══════════════════════════════════════════════════════════════╝
    """)


def ask(prompt: str, default: str = "") -> str:
    suffix = f" [{default}]" if default else ""
    value = input(f"{prompt}{suffix}: ").strip()
    return value or default


def get_user_inputs(template: Dict[str, Any]) -> Dict[str, Any]:
    """Get required user inputs."""
    print("\nRequired Configuration:")
    print("-" * 30)

    inputs: Dict[str, Any] = {}
    inputs["project_name"] = ask("Project name")
    inputs["repository"] = ask("GitHub repository (owner/repo-name)")
    inputs["region"] = ask("AWS region", template.get("aws", {}).get("region", "us-east-1"))

    default_envs = " ".join(template.get("environments", ["dev", "hml", "prd"]))
    environments: List[str] = ask("Environments (space separated)", default_envs).split()
    inputs["environments"] = environments

    root_domain = ask("Root domain (e.g. mydomain.com)")
    inputs["domains"] = {}
    for env in environments:
        prefix = "" if env == "prd" else f"{env}."
        frontend = ask(f"Frontend domain for {env}", f"{prefix}{root_domain}")
        backend = ask(f"Backend domain for {env}", f"api.{prefix}{root_domain}")
        inputs["domains"][env] = (frontend, backend)

    print("\nAWS credentials stored as GitHub secrets (leave empty to add later)")
    inputs["access_key_id"] = ask("AWS access key ID")
    inputs["secret_access_key"] = ask("AWS secret access key")

    return inputs


def customize_config(template: Dict[str, Any], inputs: Dict[str, Any]) -> Dict[str, Any]:
    """Customize configuration with user inputs."""
    config = json.loads(json.dumps(template))

    config["project"]["name"] = inputs["project_name"]
    config["github"]["repository"] = inputs["repository"]
    config["aws"]["region"] = inputs["region"]
    config["environments"] = inputs["environments"]

    if inputs["access_key_id"] and inputs["secret_access_key"]:
        config["aws"]["credentials"] = {
            "access_key_id": inputs["access_key_id"],
            "secret_access_key": inputs["secret_access_key"],
        }

    frontend = config["infrastructure"].setdefault("frontend", {})
    backend = config["infrastructure"].setdefault("backend", {})
    frontend["domain"] = {env: domains[0] for env, domains in inputs["domains"].items()}
    backend["domain"] = {env: domains[1] for env, domains in inputs["domains"].items()}

    instance_types = backend.get("instance_type", {})
    backend["instance_type"] = {
        env: instance_types.get(env, "t3.small") for env in inputs["environments"]
    }
    return config


def write_config(config: Dict[str, Any], output_path: Path) -> None:
    with open(output_path, "w", encoding="utf-8") as f:
        if output_path.suffix in (".yaml", ".yml"):
            yaml.dump(config, f, default_flow_style=False, sort_keys=False)
        else:
            json.dump(config, f, indent=2)
            f.write("\n")

    print(f"\n✅ Configuration saved to: {output_path}")


def main():
    """Main setup function."""
    display_banner()

    output_path = Path(sys.argv[1] if len(sys.argv) > 1 else "config.json")
    template_path = Path("config.example.json")

    if not template_path.exists():
        print(f"❌ {template_path} not found. Run this script from the project root.")
        return 1

    if output_path.exists():
        overwrite = input(f"{output_path} already exists. Overwrite? (y/N): ").strip().lower()
        if overwrite != 'y':
            print("Setup cancelled.")
            return 0

    with open(template_path, "r", encoding="utf-8") as f:
        template = json.load(f)

    inputs = get_user_inputs(template)
    write_config(customize_config(template, inputs), output_path)

    print("\nNext Steps:")
    print(f"1. Review and edit {output_path} if needed")
    print(f"2. Run: fullstack-setup validate --config {output_path}")
    print(f"3. Run: fullstack-setup repository --config {output_path}")
    print(f"4. Run: fullstack-setup infrastructure --config {output_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
