from agent_sandbox.exceptions import OperatorAbort
from agent_sandbox.logger import SetupLogger


class TestSetupLogger:
    def test_log_file_layout(self, tmp_path, console):
        with SetupLogger(tmp_path / "logs", "setup", console=console) as log:
            log.step("Generate SSH key")
            log.success("Key generated")
        text = log.log_path.read_text()

        assert log.log_path.parent.parent == tmp_path / "logs"
        assert log.log_path.name.endswith("_setup.log")
        assert "Agent Sandbox Setup Log" in text
        assert "[INFO] Step: Generate SSH key" in text
        assert "Status: SUCCESS" in text

    def test_output_is_stripped_of_ansi(self, logger):
        logger.log_output("\x1b[32mgreen\x1b[0m\nplain", "stderr")
        text = logger.log_path.read_text()
        assert "  [stderr] green\n" in text
        assert "  [stderr] plain\n" in text

    def test_exception_marks_run_failed(self, tmp_path, console):
        try:
            with SetupLogger(tmp_path / "logs", console=console) as log:
                raise OperatorAbort("SSH connectivity could not be verified")
        except OperatorAbort:
            pass
        text = log.log_path.read_text()

        assert log.has_errors
        assert "Aborted by operator" in text
        assert "Context: SSH connectivity could not be verified" in text
        assert "Status: FAILED" in text

    def test_markup_in_messages_is_not_interpreted(self, logger, console):
        logger.info("[skip] lucos_claude_config")
        assert "[skip] lucos_claude_config" in console.file.getvalue()
