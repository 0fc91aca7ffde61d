# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-12-20
# Description: QAHealthService.py
# -----------------------------------------------------------------------------
from dataclasses import dataclass

from health.TestRunner import TestRunner
from api.schemas.health import DeepHealthResponse, SmokeTestSummary


@dataclass
class QAHealthService:
    """
    Wraps TestRunner class which operates smoke tests
    on the index, embedding and completion providers.
    Returns DeepHealthResponse for API layer
    """

    test_runner: TestRunner

    def deep_health(self, run_stream: bool = False) -> DeepHealthResponse:
        results = self.test_runner.run_all(run_stream=run_stream)

        total = len(results)
        passed = sum(1 for ok in results.values() if ok)
        failed = total - passed

        overall_status = "ok" if failed == 0 else "error"

        summary = SmokeTestSummary(
            total=total,
            passed=passed,
            failed=failed,
        )

        return DeepHealthResponse(
            status=overall_status,
            results=results,
            summary=summary,
            failed_checks=[name for name, ok in results.items() if not ok],
        )
