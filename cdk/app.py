#!/usr/bin/env python3
"""CDK app entry point for the translation backend."""
import os

import aws_cdk as cdk

from stacks.api_stack import TranslateApiStack
from stacks.base_stack import TranslateBaseStack

app = cdk.App()

env = cdk.Environment(
    account=os.environ.get("CDK_DEFAULT_ACCOUNT"),
    region=os.environ.get("CDK_DEFAULT_REGION", "eu-central-1"),
)

environment = app.node.try_get_context("environment") or "dev"
simulate_translation = str(app.node.try_get_context("simulate_translation")).lower() == "true"
privileged_devices = app.node.try_get_context("privileged_devices") or ""

base_stack = TranslateBaseStack(
    app,
    f"MltBase-{environment}",
    environment=environment,
    env=env,
)

api_stack = TranslateApiStack(
    app,
    f"MltApi-{environment}",
    environment=environment,
    base_stack=base_stack,
    simulate_translation=simulate_translation,
    privileged_devices=privileged_devices,
    env=env,
)

app.synth()
