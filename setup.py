from setuptools import setup, find_packages

setup(
    name="pkgbump",
    version="0.1.0",
    description="Atualiza um PKGBUILD para uma nova versão upstream e recalcula os checksums.",
    author="Seu Nome",
    license="GPL-3.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "pkgbump.modules": ["extract_pkgbuild.sh"],
    },
    python_requires=">=3.9",
    install_requires=[
        "rich>=13.0.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pkgbump=pkgbump.modules.cli:main",
        ],
    },
)
