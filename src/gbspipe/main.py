import click

from . import __version__
from .align import align
from .call import call
from .demultiplex import demultiplex
from .steps import PipelineStep
from .trim import trim


class StepGroup(click.Group):
    """Command group resolving the legacy step aliases (e.g. 'f1', 'function2')"""

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        step = PipelineStep.from_name(cmd_name)
        return super().get_command(ctx, step.value if step else cmd_name)

    def resolve_command(self, ctx: click.Context, args: list[str]):
        _, cmd, args = super().resolve_command(ctx, args)
        return cmd.name if cmd else None, cmd, args


@click.group(cls=StepGroup, invoke_without_command=False)
@click.version_option(__version__)
def main():
    pass


main.add_command(demultiplex)
main.add_command(trim)
main.add_command(align)
main.add_command(call)
