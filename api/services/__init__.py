"""
API Services Layer.

Database operations behind the API endpoints. Every function takes the
request's AsyncSession and returns wire-ready (camelCase) dictionaries.
"""

from api.services.auth import (
    login,
    change_password,
    update_profile,
    get_profile,
    ensure_default_admin,
)

from api.services.positions import (
    create_position,
    list_positions,
    list_all_positions,
    get_position,
    update_position,
    delete_position,
)

from api.services.jobs import (
    create_job,
    list_jobs,
    get_job,
    get_public_job,
    update_job,
    delete_job,
    clone_job,
    toggle_job_status,
    add_question,
    update_question,
    delete_question,
)

from api.services.question_options import (
    create_option,
    list_options,
    get_option,
    update_option,
    delete_option,
    reorder_options,
    toggle_option,
)

from api.services.applications import (
    ResumeUpload,
    submit_application,
    list_applications,
    get_application,
    delete_application,
    get_resume_path,
    get_application_stats,
)

from api.services.admin import (
    get_dashboard,
)

__all__ = [
    # Auth
    "login",
    "change_password",
    "update_profile",
    "get_profile",
    "ensure_default_admin",
    # Positions
    "create_position",
    "list_positions",
    "list_all_positions",
    "get_position",
    "update_position",
    "delete_position",
    # Jobs
    "create_job",
    "list_jobs",
    "get_job",
    "get_public_job",
    "update_job",
    "delete_job",
    "clone_job",
    "toggle_job_status",
    "add_question",
    "update_question",
    "delete_question",
    # Question options
    "create_option",
    "list_options",
    "get_option",
    "update_option",
    "delete_option",
    "reorder_options",
    "toggle_option",
    # Applications
    "ResumeUpload",
    "submit_application",
    "list_applications",
    "get_application",
    "delete_application",
    "get_resume_path",
    "get_application_stats",
    # Admin
    "get_dashboard",
]
