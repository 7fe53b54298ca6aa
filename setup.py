from setuptools import setup, find_packages

setup(
    name="repomirror",
    version="0.1.0",
    description="repomirror keeps target git repositories force-mirrored from their source repositories on a fixed interval.",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=["pyyaml",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": [
            "repomirror=repomirror.main:main",
        ],
    },
    python_requires=">=3.9",
)
