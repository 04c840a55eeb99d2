"""
Contract compiler adapter.

Wraps the solc standard-JSON interface (via py-solc-x) to turn Solidity
source text into a CompiledArtifact. The first successful compilation is
cached for the lifetime of the adapter and reused for every deployment.
"""

from pathlib import Path
from typing import Any, Callable, Optional

import solcx
import structlog
from solcx.exceptions import SolcError

from ..errors import CompilationError
from ..models.deployment import CompiledArtifact

logger = structlog.get_logger(__name__)

DEFAULT_SOLC_VERSION = "0.8.20"
DEFAULT_SOURCE_FILENAME = "Token.sol"
DEFAULT_CONTRACT_NAME = "Token"
BUNDLED_CONTRACT = Path(__file__).parent.parent / "contracts" / DEFAULT_SOURCE_FILENAME


def load_contract_source(path: Optional[Path] = None) -> str:
    """Read contract source text, defaulting to the bundled token contract."""
    source_path = Path(path) if path else BUNDLED_CONTRACT
    with open(source_path, encoding="utf-8") as f:
        return f.read()


class ContractCompiler:
    """Memoizing adapter around the external Solidity compiler."""

    def __init__(
        self,
        contract_name: str = DEFAULT_CONTRACT_NAME,
        solc_version: str = DEFAULT_SOLC_VERSION,
        compile_fn: Optional[Callable[..., dict[str, Any]]] = None,
    ) -> None:
        self.contract_name = contract_name
        self.solc_version = solc_version
        self._compile_fn = compile_fn or solcx.compile_standard
        self._artifact: Optional[CompiledArtifact] = None
        self._source_text: Optional[str] = None

    @property
    def artifact(self) -> Optional[CompiledArtifact]:
        return self._artifact

    def ensure_installed(self) -> None:
        """Install the pinned solc binary if it is not already available."""
        installed = {str(v) for v in solcx.get_installed_solc_versions()}
        if self.solc_version not in installed:
            logger.info("Installing solc", version=self.solc_version)
            solcx.install_solc(self.solc_version)

    def compile(self, source_text: str) -> CompiledArtifact:
        """
        Compile contract source text into a reusable artifact.

        Compilation happens at most once per adapter; later calls return the
        cached artifact without invoking the compiler.

        Raises:
            CompilationError: If the compiler reports any error diagnostic
        """
        if self._artifact is not None:
            if source_text != self._source_text:
                logger.warning(
                    "Ignoring changed contract source, artifact already compiled",
                    contract=self.contract_name
                )
            return self._artifact

        standard_input = {
            "language": "Solidity",
            "sources": {DEFAULT_SOURCE_FILENAME: {"content": source_text}},
            "settings": {
                "outputSelection": {"*": {"*": ["abi", "evm.bytecode.object"]}},
            },
        }

        try:
            output = self._compile_fn(standard_input, solc_version=self.solc_version)
        except SolcError as e:
            raise CompilationError(
                f"Compiler rejected {self.contract_name}: {e.message}",
                diagnostics=[e.stderr_data or e.message],
            ) from e

        errors = [
            d for d in output.get("errors", [])
            if d.get("severity") == "error"
        ]
        if errors:
            raise CompilationError(
                f"Compilation of {self.contract_name} failed with {len(errors)} error(s)",
                diagnostics=[d.get("formattedMessage") or d.get("message", "") for d in errors],
            )

        try:
            contract = output["contracts"][DEFAULT_SOURCE_FILENAME][self.contract_name]
            abi = contract["abi"]
            bytecode = contract["evm"]["bytecode"]["object"]
        except KeyError as e:
            raise CompilationError(
                f"Compiler output has no contract {self.contract_name}",
                diagnostics=[f"missing key: {e}"],
            ) from e

        if not bytecode:
            raise CompilationError(
                f"Contract {self.contract_name} produced empty bytecode",
                diagnostics=["abstract contract or interface"],
            )

        self._artifact = CompiledArtifact(abi=abi, bytecode=bytecode)
        self._source_text = source_text

        logger.info(
            "Contract compiled",
            contract=self.contract_name,
            solc_version=self.solc_version,
            bytecode_size=len(bytecode) // 2
        )
        return self._artifact
