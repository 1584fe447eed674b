"""Install the trustgate package."""

from setuptools import setup, find_packages

setup(
    name='trustgate',
    version='0.1.0',
    packages=find_packages(exclude=['*test*']),
    install_requires=[
        "flask>=2.3",
        "werkzeug>=2.3",
        "requests",
        "retry",
        "python-json-logger",
    ],
    extras_require={
        'test': [
            "pytest",
            "hypothesis",
        ]
    },
    zip_safe=False
)
