# test_validation.py
import pytest

from qrmenu.errors import InvalidArgument
from qrmenu.util.validation import (
    PaymentMethod, PaymentStatus, SubscriptionPlan, TenantRole, UserRole,
    json_to_object, json_to_string_list, object_to_json, parse_enum, parse_user_role,
    string_list_to_json,
)

@pytest.mark.parametrize("raw", ["SUPER_ADMIN", "super-admin", "Super Admin", " super_admin "])
def test_parse_user_role_spellings(raw):
    assert parse_user_role(raw) is UserRole.SUPER_ADMIN

def test_parse_user_role_tenant_roles():
    assert parse_user_role("tenant-admin") is UserRole.TENANT_ADMIN
    assert parse_user_role("TENANT_STAFF").is_tenant_role
    assert not UserRole.SUPER_ADMIN.is_tenant_role

@pytest.mark.parametrize("raw", ["", "   ", "root", None, 3, "SUPERADMIN"])
def test_parse_user_role_rejects_unknown(raw):
    with pytest.raises(InvalidArgument):
        parse_user_role(raw)

def test_parse_enum_other_enums():
    assert parse_enum(PaymentMethod, "bank transfer") is PaymentMethod.BANK_TRANSFER
    assert parse_enum(PaymentStatus, "paid") is PaymentStatus.PAID
    assert parse_enum(SubscriptionPlan, SubscriptionPlan.PREMIUM) is SubscriptionPlan.PREMIUM
    with pytest.raises(InvalidArgument):
        parse_enum(PaymentStatus, "settled")

def test_string_list_codec():
    encoded = string_list_to_json(["Tomato", "جبن", "Basil"])
    assert json_to_string_list(encoded) == ["Tomato", "جبن", "Basil"]
    assert string_list_to_json(None) == "[]"

@pytest.mark.parametrize("text", [None, "", "not json", "{\"a\": 1}", "42", "[1, 2"])
def test_json_to_string_list_never_raises(text):
    assert json_to_string_list(text) == []

def test_json_to_string_list_drops_non_strings():
    assert json_to_string_list('["nuts", 3, null, "milk"]') == ["nuts", "milk"]

def test_object_codec_defaults():
    assert json_to_object(object_to_json({"a": 1}), {}) == {"a": 1}
    assert json_to_object("{broken", {"x": 0}) == {"x": 0}
    assert json_to_object("[1, 2]", {}) == {}
    assert json_to_object(None, []) == []

def test_tenant_role_maps_to_user_role():
    assert parse_enum(TenantRole, "manager").user_role is UserRole.TENANT_MANAGER
    assert {r.user_role for r in TenantRole} == {r for r in UserRole if r.is_tenant_role}
