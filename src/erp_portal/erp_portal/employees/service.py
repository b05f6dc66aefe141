from __future__ import annotations

from typing import Optional

from ..core.exceptions import ValidationError
from ..resources.service import ResourceService


class EmployeeService(ResourceService):
    """Employee directory; adds the reporting-line checks."""

    def prepare(self, values: dict, *, item_id: Optional[int]) -> None:
        manager_id = values.get("manager_id")
        if manager_id is None:
            return
        if item_id is not None and int(manager_id) == int(item_id):
            raise ValidationError("An employee cannot be their own manager")
        if not self._repo.get(int(manager_id)):
            raise ValidationError(f"Manager #{manager_id} does not exist")

    def exists(self, employee_id: int) -> bool:
        return self._repo.get(int(employee_id)) is not None
