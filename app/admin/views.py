from sqladmin import ModelView

from app.auth.models import RefreshToken
from app.signup.models import SignupRequest
from app.user.models import User


class UserAdmin(ModelView, model=User):
    name = "User"
    name_plural = "Users"

    column_list = [
        User.email,
        User.full_name,
        User.role,
        User.phone,
        User.email_verified,
        User.plan_status,
        User.id,
        User.created_at,
        User.updated_at,
    ]

    column_searchable_list = [User.email, User.full_name, User.phone]

    column_sortable_list = [
        User.email,
        User.role,
        User.email_verified,
        User.plan_status,
        User.created_at,
        User.updated_at,
    ]

    column_details_exclude_list = [
        User.password_hash,
        User.email_verification_otp,
        User.otp_expires_at,
    ]
    form_excluded_columns = [
        User.password_hash,
        User.email_verification_otp,
        User.otp_expires_at,
        User.created_at,
        User.updated_at,
    ]


class SignupRequestAdmin(ModelView, model=SignupRequest):
    name = "Signup Request"
    name_plural = "Signup Requests"

    # Reviews go through the API so the account is provisioned with them
    can_create = False
    can_edit = False

    column_list = [
        SignupRequest.email,
        SignupRequest.full_name,
        SignupRequest.role,
        SignupRequest.status,
        SignupRequest.reviewed_at,
        SignupRequest.created_at,
    ]
    column_searchable_list = [SignupRequest.email, SignupRequest.full_name]
    column_sortable_list = [
        SignupRequest.status,
        SignupRequest.role,
        SignupRequest.created_at,
    ]
    column_details_exclude_list = [SignupRequest.password_hash]


class RefreshTokenAdmin(ModelView, model=RefreshToken):
    name = "Refresh Token"
    name_plural = "Refresh Tokens"

    can_create = False
    can_edit = False

    column_list = [
        RefreshToken.id,
        RefreshToken.user_id,
        RefreshToken.expires_at,
        RefreshToken.created_at,
    ]
    column_sortable_list = [RefreshToken.expires_at, RefreshToken.created_at]
    column_details_exclude_list = [RefreshToken.token]
