import nox

# Packages must come from the session virtualenv, never from the system
nox.options.error_on_external_run = True


def install_cpu_torch(session: nox.Session) -> None:
    """Install the CPU build of pytorch, much lighter than the default one."""
    session.install(
        "torch", "--extra-index-url", "https://download.pytorch.org/whl/cpu"
    )


@nox.session(python=["3.10", "3.11", "3.12"])
def tests(session: nox.Session) -> None:
    """Run the test suite."""
    install_cpu_torch(session)
    session.install("-r", "requirements_dev.txt")
    session.install(".")
    session.run("pytest", *session.posargs)
