"""
School API Backend — Localized Message Resolver
=================================================

What:  Maps symbolic message keys to user-facing strings in the caller's language.
How:   Static translation tables keyed by language; the active culture lives in
       a ContextVar set per request by LocaleMiddleware.
Who:   Response envelope factory, validators, identity service, handlers.

Lookup order for resolve(key, "en-GB"):
    1. exact culture table ("en-GB")      (only if one is defined)
    2. language table ("en")
    3. default culture's language table   (settings.default_locale)
    4. the key itself                     (a missing translation never raises)
"""

from contextvars import ContextVar
from typing import Dict, List, Optional, Tuple

from school_api.config import settings


class MessageKeys:
    """Symbolic message keys shared by every feature."""

    # Outcomes
    SUCCESS = "Success"
    CREATED = "Created"
    UPDATED = "Updated"
    DELETED = "Deleted"
    BAD_REQUEST = "BadRequest"
    NOT_FOUND = "NotFound"
    UNAUTHORIZED = "UnAuthorized"
    FORBIDDEN = "Forbidden"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    UNPROCESSABLE = "Unprocessable"
    INTERNAL_ERROR = "InternalError"

    # Field rules
    REQUIRED = "Required"
    MAX_LENGTH = "MaxLength"
    EMPTY = "Empty"
    INVALID_EMAIL = "InvalidEmail"
    PASSWORDS_DO_NOT_MATCH = "PasswordsDoNotMatch"
    MUST_BE_POSITIVE = "MustBePositive"
    OUT_OF_RANGE = "OutOfRange"
    INVALID_BODY = "InvalidBody"

    # Business rules
    IS_EXIST = "IsExist"
    EMAIL_IS_EXIST = "EmailIsExist"
    NAME_IS_EXIST = "NameIsExist"
    CREATE_FAILED = "CreateFailed"
    UPDATE_FAILED = "UpdateFailed"
    DELETED_FAILED = "DeletedFailed"
    DEPARTMENT_NOT_FOUND = "DepartmentNotFound"
    INSTRUCTOR_NOT_FOUND = "InstructorNotFound"
    SUBJECT_NOT_FOUND = "SubjectNotFound"
    STUDENT_NOT_FOUND = "StudentNotFound"
    NOT_ENROLLED = "NotEnrolled"
    SELF_SUPERVISION = "SelfSupervision"

    # Identity
    PASSWORD_TOO_SHORT = "PasswordTooShort"
    PASSWORD_REQUIRES_DIGIT = "PasswordRequiresDigit"
    PASSWORD_REQUIRES_LOWER = "PasswordRequiresLower"
    PASSWORD_REQUIRES_UPPER = "PasswordRequiresUpper"
    PASSWORD_REQUIRES_NON_ALPHANUMERIC = "PasswordRequiresNonAlphanumeric"
    INVALID_USER_NAME = "InvalidUserName"
    INCORRECT_PASSWORD = "IncorrectPassword"
    ROLE_NOT_FOUND = "RoleNotFound"
    USER_ALREADY_IN_ROLE = "UserAlreadyInRole"
    ROLE_IS_USED = "RoleIsUsed"
    INVALID_CREDENTIALS = "InvalidCredentials"
    INVALID_TOKEN = "InvalidToken"
    TOKEN_EXPIRED = "TokenExpired"


_ENGLISH: Dict[str, str] = {
    MessageKeys.SUCCESS: "Success",
    MessageKeys.CREATED: "Created successfully",
    MessageKeys.UPDATED: "Updated successfully",
    MessageKeys.DELETED: "Deleted successfully",
    MessageKeys.BAD_REQUEST: "Bad request",
    MessageKeys.NOT_FOUND: "Not found",
    MessageKeys.UNAUTHORIZED: "Unauthorized",
    MessageKeys.FORBIDDEN: "You are not allowed to perform this action",
    MessageKeys.METHOD_NOT_ALLOWED: "This method is not allowed on this resource",
    MessageKeys.UNPROCESSABLE: "Unprocessable entity",
    MessageKeys.INTERNAL_ERROR: "An unexpected error occurred. Please try again later.",
    MessageKeys.REQUIRED: "{field} is required",
    MessageKeys.MAX_LENGTH: "{field} must not exceed {max} characters",
    MessageKeys.EMPTY: "{field} must not be empty",
    MessageKeys.INVALID_EMAIL: "{field} is not a valid email address",
    MessageKeys.PASSWORDS_DO_NOT_MATCH: "{field} does not match {other}",
    MessageKeys.MUST_BE_POSITIVE: "{field} must be greater than zero",
    MessageKeys.OUT_OF_RANGE: "{field} must be between {min} and {max}",
    MessageKeys.INVALID_BODY: "The request body could not be read",
    MessageKeys.IS_EXIST: "{field} already exists",
    MessageKeys.EMAIL_IS_EXIST: "Email already exists",
    MessageKeys.NAME_IS_EXIST: "User name already exists",
    MessageKeys.CREATE_FAILED: "Create failed",
    MessageKeys.UPDATE_FAILED: "Update failed",
    MessageKeys.DELETED_FAILED: "Delete failed",
    MessageKeys.DEPARTMENT_NOT_FOUND: "Department not found",
    MessageKeys.INSTRUCTOR_NOT_FOUND: "Instructor not found",
    MessageKeys.SUBJECT_NOT_FOUND: "Subject not found",
    MessageKeys.STUDENT_NOT_FOUND: "Student not found",
    MessageKeys.NOT_ENROLLED: "The student is not enrolled in this subject",
    MessageKeys.SELF_SUPERVISION: "An instructor cannot supervise themselves",
    MessageKeys.PASSWORD_TOO_SHORT: "Passwords must be at least {min} characters",
    MessageKeys.PASSWORD_REQUIRES_DIGIT: "Passwords must have at least one digit ('0'-'9')",
    MessageKeys.PASSWORD_REQUIRES_LOWER: "Passwords must have at least one lowercase ('a'-'z')",
    MessageKeys.PASSWORD_REQUIRES_UPPER: "Passwords must have at least one uppercase ('A'-'Z')",
    MessageKeys.PASSWORD_REQUIRES_NON_ALPHANUMERIC: "Passwords must have at least one non alphanumeric character",
    MessageKeys.INVALID_USER_NAME: "User name '{user_name}' is invalid, can only contain letters or digits",
    MessageKeys.INCORRECT_PASSWORD: "Incorrect password",
    MessageKeys.ROLE_NOT_FOUND: "Role '{role}' does not exist",
    MessageKeys.USER_ALREADY_IN_ROLE: "User is already in role '{role}'",
    MessageKeys.ROLE_IS_USED: "The role is assigned to users and cannot be deleted",
    MessageKeys.INVALID_CREDENTIALS: "User name or password is incorrect",
    MessageKeys.INVALID_TOKEN: "The access token is invalid",
    MessageKeys.TOKEN_EXPIRED: "The access token has expired",
}

_ARABIC: Dict[str, str] = {
    MessageKeys.SUCCESS: "تمت العملية بنجاح",
    MessageKeys.CREATED: "تمت الإضافة بنجاح",
    MessageKeys.UPDATED: "تم التعديل بنجاح",
    MessageKeys.DELETED: "تم الحذف بنجاح",
    MessageKeys.BAD_REQUEST: "طلب غير صالح",
    MessageKeys.NOT_FOUND: "غير موجود",
    MessageKeys.UNAUTHORIZED: "غير مصرح",
    MessageKeys.FORBIDDEN: "غير مسموح لك بتنفيذ هذا الإجراء",
    MessageKeys.METHOD_NOT_ALLOWED: "هذه الطريقة غير مسموحة على هذا المورد",
    MessageKeys.UNPROCESSABLE: "لا يمكن معالجة الطلب",
    MessageKeys.INTERNAL_ERROR: "حدث خطأ غير متوقع. يرجى المحاولة لاحقا.",
    MessageKeys.REQUIRED: "{field} مطلوب",
    MessageKeys.MAX_LENGTH: "{field} يجب ألا يتجاوز {max} حرفا",
    MessageKeys.EMPTY: "{field} يجب ألا يكون فارغا",
    MessageKeys.INVALID_EMAIL: "{field} ليس بريدا إلكترونيا صالحا",
    MessageKeys.PASSWORDS_DO_NOT_MATCH: "{field} لا يطابق {other}",
    MessageKeys.MUST_BE_POSITIVE: "{field} يجب أن يكون أكبر من صفر",
    MessageKeys.OUT_OF_RANGE: "{field} يجب أن يكون بين {min} و {max}",
    MessageKeys.INVALID_BODY: "تعذر قراءة محتوى الطلب",
    MessageKeys.IS_EXIST: "{field} موجود بالفعل",
    MessageKeys.EMAIL_IS_EXIST: "البريد الإلكتروني موجود بالفعل",
    MessageKeys.NAME_IS_EXIST: "اسم المستخدم موجود بالفعل",
    MessageKeys.CREATE_FAILED: "فشلت الإضافة",
    MessageKeys.UPDATE_FAILED: "فشل التعديل",
    MessageKeys.DELETED_FAILED: "فشل الحذف",
    MessageKeys.DEPARTMENT_NOT_FOUND: "القسم غير موجود",
    MessageKeys.INSTRUCTOR_NOT_FOUND: "المدرس غير موجود",
    MessageKeys.SUBJECT_NOT_FOUND: "المادة غير موجودة",
    MessageKeys.STUDENT_NOT_FOUND: "الطالب غير موجود",
    MessageKeys.NOT_ENROLLED: "الطالب غير مسجل في هذه المادة",
    MessageKeys.SELF_SUPERVISION: "لا يمكن للمدرس أن يشرف على نفسه",
    MessageKeys.PASSWORD_TOO_SHORT: "يجب ألا تقل كلمة المرور عن {min} أحرف",
    MessageKeys.PASSWORD_REQUIRES_DIGIT: "يجب أن تحتوي كلمة المرور على رقم واحد على الأقل",
    MessageKeys.PASSWORD_REQUIRES_LOWER: "يجب أن تحتوي كلمة المرور على حرف صغير واحد على الأقل",
    MessageKeys.PASSWORD_REQUIRES_UPPER: "يجب أن تحتوي كلمة المرور على حرف كبير واحد على الأقل",
    MessageKeys.PASSWORD_REQUIRES_NON_ALPHANUMERIC: "يجب أن تحتوي كلمة المرور على رمز واحد على الأقل",
    MessageKeys.INVALID_USER_NAME: "اسم المستخدم '{user_name}' غير صالح",
    MessageKeys.INCORRECT_PASSWORD: "كلمة المرور غير صحيحة",
    MessageKeys.ROLE_NOT_FOUND: "الدور '{role}' غير موجود",
    MessageKeys.USER_ALREADY_IN_ROLE: "المستخدم لديه الدور '{role}' بالفعل",
    MessageKeys.ROLE_IS_USED: "الدور مستخدم ولا يمكن حذفه",
    MessageKeys.INVALID_CREDENTIALS: "اسم المستخدم أو كلمة المرور غير صحيحة",
    MessageKeys.INVALID_TOKEN: "رمز الدخول غير صالح",
    MessageKeys.TOKEN_EXPIRED: "انتهت صلاحية رمز الدخول",
}

_FRENCH: Dict[str, str] = {
    MessageKeys.SUCCESS: "Succès",
    MessageKeys.CREATED: "Créé avec succès",
    MessageKeys.UPDATED: "Mis à jour avec succès",
    MessageKeys.DELETED: "Supprimé avec succès",
    MessageKeys.BAD_REQUEST: "Requête invalide",
    MessageKeys.NOT_FOUND: "Introuvable",
    MessageKeys.UNAUTHORIZED: "Non autorisé",
    MessageKeys.FORBIDDEN: "Vous n'êtes pas autorisé à effectuer cette action",
    MessageKeys.METHOD_NOT_ALLOWED: "Cette méthode n'est pas autorisée sur cette ressource",
    MessageKeys.UNPROCESSABLE: "Entité non traitable",
    MessageKeys.INTERNAL_ERROR: "Une erreur inattendue s'est produite. Veuillez réessayer plus tard.",
    MessageKeys.REQUIRED: "{field} est obligatoire",
    MessageKeys.MAX_LENGTH: "{field} ne doit pas dépasser {max} caractères",
    MessageKeys.EMPTY: "{field} ne doit pas être vide",
    MessageKeys.INVALID_EMAIL: "{field} n'est pas une adresse e-mail valide",
    MessageKeys.PASSWORDS_DO_NOT_MATCH: "{field} ne correspond pas à {other}",
    MessageKeys.MUST_BE_POSITIVE: "{field} doit être supérieur à zéro",
    MessageKeys.OUT_OF_RANGE: "{field} doit être compris entre {min} et {max}",
    MessageKeys.INVALID_BODY: "Le corps de la requête est illisible",
    MessageKeys.IS_EXIST: "{field} existe déjà",
    MessageKeys.EMAIL_IS_EXIST: "L'adresse e-mail existe déjà",
    MessageKeys.NAME_IS_EXIST: "Le nom d'utilisateur existe déjà",
    MessageKeys.CREATE_FAILED: "La création a échoué",
    MessageKeys.UPDATE_FAILED: "La mise à jour a échoué",
    MessageKeys.DELETED_FAILED: "La suppression a échoué",
    MessageKeys.DEPARTMENT_NOT_FOUND: "Département introuvable",
    MessageKeys.INSTRUCTOR_NOT_FOUND: "Enseignant introuvable",
    MessageKeys.SUBJECT_NOT_FOUND: "Matière introuvable",
    MessageKeys.STUDENT_NOT_FOUND: "Étudiant introuvable",
    MessageKeys.NOT_ENROLLED: "L'étudiant n'est pas inscrit à cette matière",
    MessageKeys.SELF_SUPERVISION: "Un enseignant ne peut pas se superviser lui-même",
    MessageKeys.PASSWORD_TOO_SHORT: "Le mot de passe doit contenir au moins {min} caractères",
    MessageKeys.PASSWORD_REQUIRES_DIGIT: "Le mot de passe doit contenir au moins un chiffre",
    MessageKeys.PASSWORD_REQUIRES_LOWER: "Le mot de passe doit contenir au moins une minuscule",
    MessageKeys.PASSWORD_REQUIRES_UPPER: "Le mot de passe doit contenir au moins une majuscule",
    MessageKeys.PASSWORD_REQUIRES_NON_ALPHANUMERIC: "Le mot de passe doit contenir au moins un caractère spécial",
    MessageKeys.INVALID_USER_NAME: "Le nom d'utilisateur '{user_name}' est invalide",
    MessageKeys.INCORRECT_PASSWORD: "Mot de passe incorrect",
    MessageKeys.ROLE_NOT_FOUND: "Le rôle '{role}' n'existe pas",
    MessageKeys.USER_ALREADY_IN_ROLE: "L'utilisateur a déjà le rôle '{role}'",
    MessageKeys.ROLE_IS_USED: "Le rôle est attribué à des utilisateurs et ne peut pas être supprimé",
    MessageKeys.INVALID_CREDENTIALS: "Nom d'utilisateur ou mot de passe incorrect",
    MessageKeys.INVALID_TOKEN: "Le jeton d'accès est invalide",
    MessageKeys.TOKEN_EXPIRED: "Le jeton d'accès a expiré",
}

# Tables are keyed by language; culture-specific tables ("en-GB") may be
# added alongside and take precedence.
TRANSLATIONS: Dict[str, Dict[str, str]] = {
    "en": _ENGLISH,
    "ar": _ARABIC,
    "fr": _FRENCH,
}

# ── Current request culture ───────────────────────────────────────────────
locale_var: ContextVar[str] = ContextVar("locale", default="")


def current_locale() -> str:
    """Culture of the request being served, or the configured default."""
    return locale_var.get() or settings.default_locale


def _language(locale: str) -> str:
    return locale.split("-", 1)[0].lower()


def _table_for(locale: str) -> Optional[Dict[str, str]]:
    return TRANSLATIONS.get(locale) or TRANSLATIONS.get(_language(locale))


def resolve(key: str, locale: Optional[str] = None, **params: object) -> str:
    """
    Resolve a message key to text for `locale` (default: current request culture).

    `params` fill `{placeholders}` in the translated template. A template
    whose placeholders are not all supplied is returned unformatted.
    """
    locale = locale or current_locale()
    template = None
    for candidate in (locale, settings.default_locale):
        table = _table_for(candidate)
        if table and key in table:
            template = table[key]
            break
    if template is None:
        return key
    if not params:
        return template
    try:
        return template.format(**params)
    except (KeyError, IndexError):
        return template


def localize(text_ar: Optional[str], text_en: Optional[str], locale: Optional[str] = None) -> Optional[str]:
    """Pick the Arabic or English variant of an entity name for `locale`."""
    locale = locale or current_locale()
    if _language(locale) == "ar":
        return text_ar or text_en
    return text_en or text_ar


# ══════════════════════════════════════════════════════════════════════════
# Culture negotiation
# ══════════════════════════════════════════════════════════════════════════

def _parse_accept_language(header: str) -> List[Tuple[str, float]]:
    """Parse `Accept-Language` into (culture, quality) pairs, best first."""
    ranges: List[Tuple[str, float]] = []
    for part in header.split(","):
        piece = part.strip()
        if not piece:
            continue
        culture, _, params = piece.partition(";")
        quality = 1.0
        params = params.strip()
        if params.startswith("q="):
            try:
                quality = float(params[2:])
            except ValueError:
                quality = 0.0
        if quality > 0:
            ranges.append((culture.strip(), quality))
    return sorted(ranges, key=lambda item: item[1], reverse=True)


def _match_supported(culture: str, supported: List[str]) -> Optional[str]:
    lowered = culture.lower()
    for candidate in supported:
        if candidate.lower() == lowered:
            return candidate
    language = _language(culture)
    for candidate in supported:
        if _language(candidate) == language:
            return candidate
    return None


def negotiate_locale(
    query_culture: Optional[str] = None,
    accept_language: Optional[str] = None,
) -> str:
    """
    Choose the request culture: `?culture=` first, then `Accept-Language`,
    then the configured default. Only supported cultures are returned.
    """
    supported = settings.supported_locales_list
    if query_culture:
        match = _match_supported(query_culture, supported)
        if match:
            return match
    if accept_language:
        for culture, _quality in _parse_accept_language(accept_language):
            match = _match_supported(culture, supported)
            if match:
                return match
    return settings.default_locale
