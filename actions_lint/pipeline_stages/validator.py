import importlib
import logging
import os
from abc import abstractmethod
from typing import List, Optional

import yaml

from actions_lint.domain_model.nodes import Document
from actions_lint.globals.lint_config import LintConfig
from actions_lint.globals.problems import Problems
from actions_lint.globals.process_stage import ProcessStage
from actions_lint.rules.rule import Rule

logger = logging.getLogger(__name__)


class Validator(ProcessStage[Document, Problems]):
    @abstractmethod
    def process(self, document: Document) -> Problems:
        """Validate the given document and return any problems found.

        Args:
            document: The loaded workflow document.

        Returns:
            A Problems object containing any issues found during validation.
        """
        pass


class ExtensibleValidator(Validator):
    """
    Runs the rules registered in a ``rules.yml`` file.

    The file maps rule ids to ``module:Class`` references. Rules disabled in
    the lint configuration are not instantiated.
    """

    def __init__(
        self,
        problems: Problems,
        config: Optional[LintConfig] = None,
        config_path: Optional[str] = None,
    ) -> None:
        super().__init__(problems)
        self.config = config or LintConfig()
        if config_path is None:
            config_path = os.path.join(
                os.path.dirname(os.path.dirname(__file__)), "rules", "rules.yml"
            )
        self.config_path = config_path

    def _load_rules_from_config(self, document: Document) -> List[Rule]:
        """Instantiate the registered rules for a document.

        Raises:
            FileNotFoundError: If the rules file does not exist.
            yaml.YAMLError: If the rules file is not valid YAML.
            ImportError: If a rule module cannot be imported.
            AttributeError: If a rule class does not exist in its module.
        """
        with open(self.config_path, "r", encoding="utf-8") as f:
            registry = yaml.safe_load(f) or {}

        rules: List[Rule] = []
        for rule_id, reference in (registry.get("rules") or {}).items():
            if self.config.is_disabled(rule_id):
                logger.debug("Rule %s is disabled", rule_id)
                continue
            module_name, class_name = reference.split(":")
            module = importlib.import_module(module_name)
            rule_class = getattr(module, class_name)
            rules.append(rule_class(document, self.config))
        return rules

    def process(self, document: Document) -> Problems:
        for rule in self._load_rules_from_config(document):
            logger.debug("Running rule %s on %s", rule.NAME, document.path)
            for problem in rule.check():
                self.problems.append(problem)
        return self.problems
