from .common import utcnow, as_utc_naive
from .project import Project, Fair
from .user import (
    AvailableAdminRole, AvailableStudentRole, ADMIN_ROLE_NAMES, STUDENT_ROLE_NAMES,
    AdminRole, StudentRole, Admin, Student, CoordinatorProject, Blacklist,
)
from .security_code import SecurityCode
from .group import Group, GroupMember, Complaint
from .deliverable import (
    GroupDeliverable, GroupDeliverableComponent, GroupDeliverablesComponent,
    GroupDeliverableSelection, GroupComponentImplementationDetail, Transaction,
    StudentDeliverable, StudentDeliverableComponent, StudentDeliverablesComponent,
    StudentDeliverableSelection, StudentUpload,
)

__all__ = [
    "utcnow", "as_utc_naive",
    "Project", "Fair",
    "AvailableAdminRole", "AvailableStudentRole", "ADMIN_ROLE_NAMES", "STUDENT_ROLE_NAMES",
    "AdminRole", "StudentRole", "Admin", "Student", "CoordinatorProject", "Blacklist",
    "SecurityCode",
    "Group", "GroupMember", "Complaint",
    "GroupDeliverable", "GroupDeliverableComponent", "GroupDeliverablesComponent",
    "GroupDeliverableSelection", "GroupComponentImplementationDetail", "Transaction",
    "StudentDeliverable", "StudentDeliverableComponent", "StudentDeliverablesComponent",
    "StudentDeliverableSelection", "StudentUpload",
]
