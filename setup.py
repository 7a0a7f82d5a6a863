from setuptools import setup, find_packages

setup(
    name="lif_patch",
    version="0.1.0",
    packages=find_packages(include=["lif_patch", "lif_patch.*"]),
    install_requires=[
        "pyyaml",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    author="Uday Kanth",
    description="Line-indexed file patching with stable line identifiers for model-driven edits.",
)
