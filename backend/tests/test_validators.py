"""
School API Backend — Validator Unit Tests
===========================================

What:  Rule checks for commands, without any database.

What we test:
    ✅ A valid command yields no errors
    ✅ Every violated rule is reported (no short-circuit)
    ✅ Required and MaxLength are independent rules
    ✅ Edit commands are validated like creates, plus their id
"""

from school_api.features.departments import (
    AddDepartmentCommand,
    AddDepartmentValidator,
    EditDepartmentCommand,
    EditDepartmentValidator,
    GetDepartmentByIdQuery,
    GetDepartmentByIdValidator,
)
from school_api.features.instructors import AddInstructorCommand, AddInstructorValidator
from school_api.features.students import (
    AddStudentCommand,
    AddStudentValidator,
    EnrollStudentCommand,
    EnrollStudentValidator,
    GetStudentPaginatedListQuery,
    GetStudentPaginatedListValidator,
)
from school_api.features.subjects import AddSubjectCommand, AddSubjectValidator
from school_api.features.users import (
    ChangeUserPasswordCommand,
    ChangeUserPasswordValidator,
    RegisterUserCommand,
    RegisterUserValidator,
)
from school_api.validation import Rules, ValidationResult


class TestRules:

    def test_required_rejects_none_and_blank(self):
        rules = Rules().required("a", None).required("b", "   ").required("c", "x")
        assert rules.errors == ["a is required", "b is required"]

    def test_max_length_skips_missing_values(self):
        assert Rules().max_length("a", None, 3).errors == []

    def test_email_shape(self):
        rules = Rules().email("email", "not-an-email").email("other", "mona@school.test")
        assert rules.errors == ["email is not a valid email address"]

    def test_in_range_bounds_are_inclusive(self):
        rules = Rules().in_range("grade", 0, 0, 100).in_range("grade", 100, 0, 100)
        assert rules.errors == []
        assert Rules().in_range("grade", 101, 0, 100).errors == ["grade must be between 0 and 100"]

    def test_result_validity(self):
        assert ValidationResult().is_valid
        assert not ValidationResult(errors=("x",)).is_valid


class TestStudentValidators:

    def test_valid_student(self):
        command = AddStudentCommand(name_ar="أحمد", name_en="Ahmed", address="Cairo", department_id=1)
        assert AddStudentValidator().validate(command).is_valid

    def test_missing_names_report_both(self):
        result = AddStudentValidator().validate(AddStudentCommand())
        assert result.errors == ("nameAr is required", "nameEn is required")

    def test_blank_and_too_long_reports_both_rules(self):
        command = AddStudentCommand(name_ar=" " * 201, name_en="Ahmed")
        result = AddStudentValidator().validate(command)
        assert result.errors == (
            "nameAr is required",
            "nameAr must not exceed 200 characters",
        )

    def test_enroll_grade_range(self):
        result = EnrollStudentValidator().validate(EnrollStudentCommand(student_id=1, subject_id=2, grade=120))
        assert result.errors == ("grade must be between 0 and 100",)

    def test_page_rules(self):
        query = GetStudentPaginatedListQuery(page_number=0, page_size=1000)
        result = GetStudentPaginatedListValidator().validate(query)
        assert len(result.errors) == 2

    def test_page_number_has_an_upper_bound(self):
        query = GetStudentPaginatedListQuery(page_number=10**19, page_size=10)
        result = GetStudentPaginatedListValidator().validate(query)
        assert result.errors == ("pageNumber must be between 1 and 1000000",)

    def test_department_student_page_number_has_an_upper_bound(self):
        query = GetDepartmentByIdQuery(id=1, student_page_number=10**19)
        result = GetDepartmentByIdValidator().validate(query)
        assert result.errors == ("studentPageNumber must be between 1 and 1000000",)


class TestOtherValidators:

    def test_department_requires_manager(self):
        result = AddDepartmentValidator().validate(AddDepartmentCommand(name_ar="علوم", name_en="Science"))
        assert result.errors == ("managerId is required",)

    def test_department_edit_is_validated(self):
        result = EditDepartmentValidator().validate(EditDepartmentCommand(id=2, name_en="Science", manager_id=1))
        assert result.errors == ("nameAr is required",)

    def test_instructor_negative_salary(self):
        command = AddInstructorCommand(name_ar="سارة", name_en="Sara", salary=-5)
        result = AddInstructorValidator().validate(command)
        assert result.errors == ("salary must be between 0 and 10000000",)

    def test_subject_period_and_length(self):
        command = AddSubjectCommand(name_ar="ر" * 101, name_en="Math", period=0)
        result = AddSubjectValidator().validate(command)
        assert result.errors == (
            "nameAr must not exceed 100 characters",
            "period must be between 1 and 52",
        )

    def test_register_collects_every_violation(self):
        command = RegisterUserCommand(email="broken", password="Secret1!", confirm_password="Other1!")
        result = RegisterUserValidator().validate(command)
        assert result.errors == (
            "userName is required",
            "email is not a valid email address",
            "confirmPassword does not match password",
        )

    def test_change_password_requires_everything(self):
        result = ChangeUserPasswordValidator().validate(ChangeUserPasswordCommand())
        assert len(result.errors) == 4
