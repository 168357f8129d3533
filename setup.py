from setuptools import find_namespace_packages, setup

setup(
    name="stepin",
    version="0.3.0",
    description="Step into Clojure-style function and macro calls",
    long_description=(
        "Turns a call into an expression that runs one step of the callee "
        "with its parameters bound to the call's arguments."
    ),
    python_requires=">=3.9",
    packages=find_namespace_packages(include=["stepin", "stepin.*"]),
    package_data={"stepin.std": ["*.clj"]},
    include_package_data=True,
    install_requires=[],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": [
            "stepin=stepin.cli:main",
        ],
    },
)
