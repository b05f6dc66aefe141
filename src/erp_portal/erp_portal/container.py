from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .activity.mysql_activity_repository import MySQLActivityRepository
from .activity.service import ActivityService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.model import ShiftPolicy
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.mysql_punch_repository import MySQLPunchRepository
from .attendance.service import AttendanceService
from .crm import definitions as crm_definitions
from .crm.service import CompanyService, FollowUpService, ProposalChildService, ProposalService
from .database.connection import DBConfig, DatabaseConnection
from .documents import definitions as document_definitions
from .documents.service import DocumentService
from .employees.service import EmployeeService
from .payroll.calculator.standard_calculator import StandardPayrollCalculator
from .payroll.mysql_da_repository import MySQLDAScheduleRepository
from .payroll.mysql_payroll_repository import MySQLPayrollSlipRepository
from .payroll.mysql_salary_repository import MySQLSalaryStructureRepository
from .payroll.salary_service import SalaryStructureService
from .payroll.service import PayrollService
from .resources import definitions as resource_definitions
from .resources.mysql_resource_repository import MySQLResourceRepository
from .resources.service import ResourceService
from .tickets.mysql_ticket_repository import MySQLTicketRepository
from .tickets.service import TicketService
from .todos.mysql_todo_repository import MySQLTodoRepository
from .todos.service import TodoService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    attendance_service: AttendanceService
    resources: dict[str, ResourceService]
    employee_service: EmployeeService
    salary_structure_service: SalaryStructureService
    payroll_service: PayrollService
    ticket_service: TicketService
    todo_service: TodoService
    documents: dict[str, DocumentService]
    activity_service: ActivityService
    company_service: CompanyService
    proposal_service: ProposalService
    followup_service: FollowUpService
    proposal_children: dict[str, ProposalChildService]


def build_container(
    *,
    db_config: dict,
    shift_policy: Optional[dict] = None,
    activity: Optional[dict] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    resources: dict[str, ResourceService] = {}
    for definition in resource_definitions.ALL:
        repo = MySQLResourceRepository(conn, definition)
        if definition is resource_definitions.EMPLOYEES:
            resources[definition.name] = EmployeeService(repo)
        else:
            resources[definition.name] = ResourceService(repo)
    employee_service = resources[resource_definitions.EMPLOYEES.name]

    attendance_repo = MySQLAttendanceRepository(conn)
    attendance_service = AttendanceService(
        MySQLPunchRepository(conn),
        attendance_repo,
        policy=ShiftPolicy.from_config(shift_policy or {}),
        strategy_factory=AttendanceStrategyFactory(),
    )

    structures_repo = MySQLSalaryStructureRepository(conn)
    salary_structure_service = SalaryStructureService(structures_repo, employee_service)
    payroll_service = PayrollService(
        structures_repo,
        MySQLDAScheduleRepository(conn),
        MySQLPayrollSlipRepository(conn),
        attendance_repo,
        calculator=StandardPayrollCalculator(),
    )

    documents = {
        kind.definition.name: DocumentService(kind, MySQLResourceRepository(conn, kind.definition))
        for kind in document_definitions.ALL
    }

    activity_service = ActivityService(MySQLActivityRepository(conn), **(activity or {}))

    proposals_repo = MySQLResourceRepository(conn, crm_definitions.PROPOSALS)
    proposal_service = ProposalService(
        proposals_repo,
        MySQLResourceRepository(conn, resource_definitions.PROJECTS),
    )
    proposal_children = {
        segment: ProposalChildService(MySQLResourceRepository(conn, definition), proposals_repo)
        for segment, definition in crm_definitions.PROPOSAL_CHILDREN.items()
    }

    return Container(
        conn=conn,
        attendance_service=attendance_service,
        resources=resources,
        employee_service=employee_service,
        salary_structure_service=salary_structure_service,
        payroll_service=payroll_service,
        ticket_service=TicketService(MySQLTicketRepository(conn)),
        todo_service=TodoService(MySQLTodoRepository(conn)),
        documents=documents,
        activity_service=activity_service,
        company_service=CompanyService(MySQLResourceRepository(conn, crm_definitions.COMPANIES)),
        proposal_service=proposal_service,
        followup_service=FollowUpService(
            MySQLResourceRepository(conn, crm_definitions.FOLLOW_UPS),
            MySQLResourceRepository(conn, resource_definitions.LEADS),
        ),
        proposal_children=proposal_children,
    )
