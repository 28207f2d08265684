from __future__ import annotations

from oplint import ast
from oplint.collect import collect_func_decls
from oplint.extract import FunctionRecord, extract_function
from oplint.parser import parse_file


def _records(src: str, package: str = "pkg") -> list[FunctionRecord]:
    file = parse_file(src)
    return [extract_function(d, package) for d in collect_func_decls(file)]


def _record(src: str, package: str = "pkg") -> FunctionRecord:
    (record,) = _records(src, package)
    return record


def test_plain_function() -> None:
    record = _record(
        """
package pkg

func Run() error {
	const op = "pkg/Run"
	return nil
}
"""
    )
    assert record.function_name == "Run"
    assert record.receiver_name == ""
    assert record.receiver_type_name is None
    assert record.has_error_result
    assert record.canonical_name == "pkg/Run"
    assert record.op_constant is not None
    assert record.op_constant.name == "op"
    assert record.op_constant.value == "pkg/Run"
    assert record.op_constant.name_loc == ast.Located(line=5, column=8)
    assert record.op_constant.value_loc == ast.Located(line=5, column=13)
    assert record.loc == ast.Located(line=4, column=1)


def test_pointer_and_value_receivers() -> None:
    ptr, val = _records(
        """
package pkg

func (s *Store) Get() {}

func (s Store) Put() {}
"""
    )
    assert (ptr.receiver_name, ptr.receiver_type_name) == ("s", "Store")
    assert (val.receiver_name, val.receiver_type_name) == ("s", "Store")
    assert ptr.canonical_name == "pkg/Store.Get"
    assert val.canonical_name == "pkg/Store.Put"


def test_unnamed_receiver() -> None:
    record = _record("package pkg\nfunc (*Store) Close() {}\n")
    assert record.receiver_name == ""
    assert record.receiver_type_name == "Store"


def test_generic_receiver_drops_type_arguments() -> None:
    record = _record("package pkg\nfunc (l *List[T]) Push(v T) {}\n")
    assert record.receiver_type_name == "List"
    assert record.canonical_name == "pkg/List.Push"


def test_double_pointer_receiver_has_no_type_name() -> None:
    record = _record("package pkg\nfunc (s **Store) Weird() {}\n")
    assert record.receiver_name == "s"
    assert record.receiver_type_name is None
    assert record.canonical_name == "pkg/Weird"


def test_error_result_detection() -> None:
    records = _records(
        """
package pkg

func a() error { return nil }
func b() (int, error) { return 0, nil }
func c() (n int, err error) { return }
func d() int { return 0 }
func e() {}
func f() errors.Error { return nil }
func g() *error { return nil }
"""
    )
    assert [r.has_error_result for r in records] == [True, True, True, False, False, False, False]


def test_op_in_nested_block_is_ignored() -> None:
    record = _record(
        """
package pkg

func f() error {
	if true {
		const op = "pkg/f"
	}
	return nil
}
"""
    )
    assert record.op_constant is None


def test_last_op_wins() -> None:
    record = _record(
        """
package pkg

func f() {
	const op = "pkg/first"
	const Op = "pkg/second"
}
"""
    )
    assert record.op_constant.name == "Op"
    assert record.op_constant.value == "pkg/second"


def test_grouped_and_multi_name_specs() -> None:
    record = _record(
        """
package pkg

func f() {
	const (
		name, op = "x", "pkg/f"
	)
}
"""
    )
    assert record.op_constant.value == "pkg/f"
    assert record.op_constant.name_loc.column == 9


def test_raw_string_value() -> None:
    record = _record("package pkg\nfunc f() {\n\tconst op = `pkg/f`\n}\n")
    assert record.op_constant.value == "pkg/f"


def test_non_string_initializers_have_empty_value() -> None:
    records = _records(
        """
package pkg

func a() {
	const op = 42
}

func b() {
	const op = prefix + "/b"
}

func c() {
	const (
		op = "pkg/c"
		Op
	)
}
"""
    )
    assert [r.op_constant.value for r in records] == ["", "", ""]
    assert all(r.op_constant.value_loc is None for r in records)


def test_other_constant_names_ignored() -> None:
    record = _record("package pkg\nfunc f() {\n\tconst OP, oper = \"a\", \"b\"\n}\n")
    assert record.op_constant is None


def test_function_without_body() -> None:
    record = _record("package pkg\nfunc external() error\n")
    assert record.op_constant is None
    assert record.has_error_result


def test_package_name_is_taken_from_argument() -> None:
    record = _record("package pkg\nfunc f() {}\n", package="example.com/pkg")
    assert record.canonical_name == "example.com/pkg/f"
