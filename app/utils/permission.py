from app.models.quiz import Quiz
from app.schemas.user import UserContext
from app.core.constants import RoleEnum
from app.core.exceptions import ForbiddenError


class PermissionHelper:
    @staticmethod
    def is_admin(context: UserContext) -> bool:
        return context.role == RoleEnum.ADMIN

    @staticmethod
    def is_teacher(context: UserContext) -> bool:
        return context.role == RoleEnum.TEACHER

    @staticmethod
    def is_student(context: UserContext) -> bool:
        return context.role == RoleEnum.STUDENT

    @staticmethod
    def is_quiz_owner(context: UserContext, quiz: Quiz) -> bool:
        return context.user.id in quiz.teacher_ids

    @staticmethod
    def can_manage_quiz(context: UserContext, quiz: Quiz) -> bool:
        if PermissionHelper.is_admin(context):
            return True
        return PermissionHelper.is_teacher(context) and PermissionHelper.is_quiz_owner(context, quiz)

    @staticmethod
    def require_teacher_or_admin(context: UserContext, error_message: str = "Only teachers and admins can perform this action."):
        if not (PermissionHelper.is_teacher(context) or PermissionHelper.is_admin(context)):
            raise ForbiddenError(error_message)

    @staticmethod
    def require_student(context: UserContext, error_message: str = "Only students can perform this action."):
        if not PermissionHelper.is_student(context):
            raise ForbiddenError(error_message)

    @staticmethod
    def require_quiz_management_permission(context: UserContext, quiz: Quiz):
        if not PermissionHelper.can_manage_quiz(context, quiz):
            raise ForbiddenError("You do not have permission to manage this quiz.")


permission_helper = PermissionHelper()
