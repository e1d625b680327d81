import json
from typing import Any

from app.audit.models import AuditResult, CodeInfo, ResultBag
from app.queue.models import Task


class PayloadBuilder:
    """Renders the final audit payload for a task.

    Output is compact JSON with a fixed field order, sorted report kinds, and
    empty optional fields omitted, so identical inputs give identical bytes.
    """

    def build(self, task: Task, results: ResultBag) -> bytes:
        code_info = results.code_info or CodeInfo(type=task.project_type)
        payload: dict[str, Any] = {
            "title": task.title,
            "content": task.content,
            "version": task.version,
            "checksum": results.checksum or task.checksum,
            "visibility": task.visibility,
            "project_type": code_info.type or task.project_type,
            "source_url": task.source_url,
            "source_type": task.source_type,
            "code_info": code_info.to_dict(),
            "reports": {},
        }
        for kind in results.kinds():
            result = results.get(kind)
            if result is not None:
                payload["reports"][kind] = self._report(result)
        return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")

    @staticmethod
    def _report(result: AuditResult) -> dict[str, Any]:
        report: dict[str, Any] = {
            "raw": result.raw.to_dict(),
            "parsed": result.parsed.to_dict(),
            "summary": result.summary.to_dict(),
        }
        if not result.details.is_empty():
            report["details"] = result.details.to_dict()
        if result.compatible_versions:
            report["compatible_versions"] = list(result.compatible_versions)
        if result.error:
            report["error"] = result.error
        return report
