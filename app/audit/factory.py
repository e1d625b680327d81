from app.audit.base import PostProcessor, Processor
from app.audit.phpcs.phpcompat import PhpCompat
from app.audit.phpcs.processor import CommandRunner, PhpcsProcessor
from app.audit.runner import AuditRunner
from app.config.settings import Settings


class AuditRunnerFactory:
    """Builds a fresh processor chain for each task.

    Processors keep per-run state (the last raw report, the post-processor's
    parent), so concurrently processed tasks must not share instances.
    """

    def __init__(self, settings: Settings, runner: CommandRunner | None = None) -> None:
        self._standards = settings.phpcs_standard_list()
        self._phpcs_bin = settings.phpcs_bin
        self._runner = runner or CommandRunner()

    def create(self) -> AuditRunner:
        processors: list[Processor] = []
        post_processors: dict[str, list[PostProcessor]] = {}
        for standard in self._standards:
            processor = PhpcsProcessor(standard, phpcs_bin=self._phpcs_bin, runner=self._runner)
            processors.append(processor)
            if standard.lower() == "phpcompatibility":
                post_processors[processor.kind] = [PhpCompat()]
        return AuditRunner(processors, post_processors)
