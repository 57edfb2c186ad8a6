# setup.py
from setuptools import setup, find_packages

setup(
    name="chatpatch",
    version="0.1.0",
    description="Turns model replies written in a small command protocol into validated file edits.",
    author="ChatPatch Team",
    packages=find_packages(include=['chatpatch', 'chatpatch.*']),
    include_package_data=True,
    package_data={
        'chatpatch': ['templates/*.j2', 'templates/prompts/*.j2'],
    },
    install_requires=[
        "click>=8.0",
        "pyyaml",
        "jinja2",
        "rich",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            'chatpatch = chatpatch.cli:cli',
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
