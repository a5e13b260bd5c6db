"""JSON reporter for advisory responses.

Outputs structured JSON for notification and CI/CD integration.
"""

import json
import sys
from typing import TextIO

from credential_advisor.advisory import AdvisoryResponse
from credential_advisor.policy import RotationObligation, RotationRecord
from credential_advisor.policy.models import utcnow


class JSONReporter:
    """Output advisory results as JSON."""

    def __init__(
        self,
        output: TextIO | None = None,
        pretty: bool = False,
    ) -> None:
        """Initialize the JSON reporter.

        Args:
            output: File to write to (default: stdout)
            pretty: Pretty-print JSON with indentation
        """
        self.output = output or sys.stdout
        self.pretty = pretty

    def _write(self, payload: dict) -> None:
        indent = 2 if self.pretty else None
        json.dump(payload, self.output, indent=indent, default=str)
        self.output.write("\n")

    def report(self, response: AdvisoryResponse, title: str | None = None) -> None:
        """Output one advisory response."""
        payload = response.to_dict()
        if title:
            payload["workspace"] = title
        payload["needs_attention"] = response.needs_attention
        self._write(payload)

    def report_rotation(self, rotation: RotationObligation) -> None:
        self._write(rotation.to_dict())

    def report_rotation_record(self, record: RotationRecord) -> None:
        self._write(record.to_dict())

    def report_error(self, message: str, conflict: bool = False) -> None:
        """Output error as JSON."""
        self._write(
            {
                "error": True,
                "conflict": conflict,
                "message": message,
                "timestamp": utcnow().isoformat(),
            }
        )
