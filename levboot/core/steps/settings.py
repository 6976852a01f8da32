"""
Settings step — write config.env from the app's template.
"""

from __future__ import annotations

from levboot.core.engine.runner import Step, StepContext
from levboot.core.models.action import Receipt
from levboot.core.models.step import Phase
from levboot.core.services.config_materializer import materialize


def write_config(ctx: StepContext) -> Receipt:
    config = ctx.config
    template = config.template_path()
    output = config.output_path()

    if template.is_file():
        ctx.info(f"Preparing {config.config_output} from {config.config_template}...")
    else:
        ctx.info(f"No {config.config_template} found; asking for common keys.")

    try:
        result = materialize(
            template,
            output,
            ask=ctx.prompter.ask,
            fallback_keys=config.fallback_keys,
        )
    except OSError as e:
        return Receipt.failure("fs", "fs:config", f"Cannot write {output}: {e}")

    ctx.info(f"{config.config_output} prepared at {output}")
    return Receipt.success(
        "fs",
        "fs:config",
        output=str(output),
        metadata={"source": result.source, "keys": list(result.values)},
    )


def settings_steps() -> list[Step]:
    return [
        Step(
            name="write-config",
            phase=Phase.CONFIGURING,
            action=write_config,
            description="config.env setup",
            remediation="Create config.env by hand from config.env.example.",
        )
    ]
