"""Unit tests for the contract compiler adapter."""

from unittest.mock import Mock, patch

import pytest
from solcx.exceptions import SolcError

from tokenfleet.chain.compiler import (
    BUNDLED_CONTRACT,
    ContractCompiler,
    load_contract_source,
)
from tokenfleet.errors import CompilationError

ABI = [{"type": "function", "name": "transfer"}]


def _output(bytecode: str = "6080604052", errors=None) -> dict:
    output = {
        "contracts": {
            "Token.sol": {
                "Token": {"abi": ABI, "evm": {"bytecode": {"object": bytecode}}},
            }
        }
    }
    if errors is not None:
        output["errors"] = errors
    return output


class TestCompile:
    """Test suite for ContractCompiler.compile."""

    def test_compile_returns_artifact(self) -> None:
        """Successful compilation yields the ABI and bytecode."""
        compile_fn = Mock(return_value=_output())
        compiler = ContractCompiler(compile_fn=compile_fn)

        artifact = compiler.compile("contract Token {}")

        assert artifact.abi == ABI
        assert artifact.bytecode == "6080604052"
        assert compiler.artifact is artifact

        standard_input = compile_fn.call_args[0][0]
        assert standard_input["language"] == "Solidity"
        assert standard_input["sources"]["Token.sol"]["content"] == "contract Token {}"
        assert compile_fn.call_args[1]["solc_version"] == "0.8.20"

    def test_compile_is_memoized(self) -> None:
        """The compiler runs once; later calls reuse the artifact."""
        compile_fn = Mock(return_value=_output())
        compiler = ContractCompiler(compile_fn=compile_fn)

        first = compiler.compile("contract Token {}")
        second = compiler.compile("contract Token {}")
        third = compiler.compile("contract Changed {}")

        assert first is second is third
        compile_fn.assert_called_once()

    def test_warnings_do_not_fail(self) -> None:
        """Warning diagnostics are tolerated."""
        warning = {"severity": "warning", "formattedMessage": "unused variable"}
        compiler = ContractCompiler(compile_fn=Mock(return_value=_output(errors=[warning])))

        assert compiler.compile("contract Token {}").bytecode

    def test_error_diagnostics_raise(self) -> None:
        """Any error-severity diagnostic aborts compilation."""
        errors = [
            {"severity": "error", "formattedMessage": "ParserError: expected ';'"},
            {"severity": "warning", "formattedMessage": "unused"},
        ]
        compiler = ContractCompiler(compile_fn=Mock(return_value=_output(errors=errors)))

        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("contract Token {")

        assert exc_info.value.diagnostics == ["ParserError: expected ';'"]
        assert exc_info.value.recoverable is False
        assert compiler.artifact is None

    def test_solc_error_mapped(self) -> None:
        """A compiler process failure becomes a CompilationError."""
        solc_error = SolcError(
            message="solc exited",
            command=["solc", "--standard-json"],
            return_code=1,
            stdin_data="",
            stdout_data="",
            stderr_data="fatal",
        )
        compiler = ContractCompiler(compile_fn=Mock(side_effect=solc_error))

        with pytest.raises(CompilationError) as exc_info:
            compiler.compile("contract Token {}")

        assert exc_info.value.diagnostics == ["fatal"]

    def test_missing_contract_raises(self) -> None:
        """Output without the named contract is an error."""
        compiler = ContractCompiler(contract_name="Other", compile_fn=Mock(return_value=_output()))

        with pytest.raises(CompilationError):
            compiler.compile("contract Token {}")

    def test_empty_bytecode_raises(self) -> None:
        """Abstract contracts cannot be deployed."""
        compiler = ContractCompiler(compile_fn=Mock(return_value=_output(bytecode="")))

        with pytest.raises(CompilationError):
            compiler.compile("abstract contract Token {}")


class TestInstallation:
    """Test suite for compiler binary installation."""

    @patch("tokenfleet.chain.compiler.solcx")
    def test_installs_missing_version(self, mock_solcx) -> None:
        mock_solcx.get_installed_solc_versions.return_value = ["0.8.19"]

        ContractCompiler(compile_fn=Mock()).ensure_installed()

        mock_solcx.install_solc.assert_called_once_with("0.8.20")

    @patch("tokenfleet.chain.compiler.solcx")
    def test_skips_installed_version(self, mock_solcx) -> None:
        mock_solcx.get_installed_solc_versions.return_value = ["0.8.20"]

        ContractCompiler(compile_fn=Mock()).ensure_installed()

        mock_solcx.install_solc.assert_not_called()


class TestContractSource:
    """Test suite for contract source loading."""

    def test_bundled_contract_exists(self) -> None:
        assert BUNDLED_CONTRACT.exists()

    def test_bundled_contract_is_token(self) -> None:
        source = load_contract_source()
        assert "contract Token" in source
        assert "function transfer" in source
        assert "decimals" in source

    def test_custom_path(self, tmp_path) -> None:
        path = tmp_path / "Other.sol"
        path.write_text("contract Other {}")
        assert load_contract_source(path) == "contract Other {}"
