[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gcsfuse-tools"
version = "0.1.0"
description = "Mount helper, build and packaging tools for the gcsfuse file system."
requires-python = ">=3.10"
keywords = ["gcsfuse", "fuse", "mount", "packaging", "deb", "rpm", "build"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX :: Linux",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Build Tools",
    "Topic :: System :: Filesystems",
]
dependencies = [
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
mount-gcsfuse = "gcsfuse_tools.mount_helper:main"
build-gcsfuse = "gcsfuse_tools.build_tool:main"
package-gcsfuse = "gcsfuse_tools.release:main"

[tool.hatch.build.targets.wheel]
packages = ["gcsfuse_tools"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
