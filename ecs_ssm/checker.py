import subprocess


class ConfigChecker:
    @staticmethod
    def _runs(*argv):
        try:
            subprocess.run(
                argv,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
            )
            return True
        except (subprocess.CalledProcessError, FileNotFoundError):
            return False

    @classmethod
    def check_aws_cli(cls):
        """Check if the AWS CLI is installed and accessible."""
        return cls._runs("aws", "--version")

    @classmethod
    def check_session_manager_plugin(cls):
        """Check if session-manager-plugin is installed and accessible."""
        return cls._runs("session-manager-plugin", "--version")

    def validate_all(self):
        """Perform all checks needed before starting a session."""
        return {
            "aws": self.check_aws_cli(),
            "session-manager-plugin": self.check_session_manager_plugin(),
        }
