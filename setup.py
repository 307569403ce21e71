from setuptools import find_packages, setup

setup(
    name="dynamo-search-relay",
    version="0.1.0",
    description=(
        "Relay DynamoDB stream records from SQS into OpenSearch and purge "
        "expired documents"
    ),
    packages=find_packages(
        include=["dynamo_search_relay", "dynamo_search_relay.*"]
    ),
    python_requires=">=3.10",
    install_requires=[
        "boto3>=1.26.0",
        "opensearch-py>=2.4.0",
        "requests>=2.26.0",
        "python-dateutil>=2.8.2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
            "pytest-cov",
            "moto",
            "freezegun",
        ]
    },
)
