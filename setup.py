from setuptools import find_packages, setup

setup(
    name="django-access-expiration",
    version="1.0.0",
    python_requires=">=3.8",
    packages=find_packages(exclude=["access_expiration.tests", "access_expiration.tests.*"]),
    include_package_data=True,
    license="Public domain",
    description="Time based access expiration for the users of a Django site, with expiration reminder and welcome emails.",
    long_description="Denies access to users whose registration is older than a configurable number of days, "
    "reminds them by email before it happens and welcomes new users after a few days.",
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "Environment :: Web Environment",
        "Framework :: Django",
        "Intended Audience :: System Administrators",
        "License :: Public Domain",
        "Natural Language :: English",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
    ],
    install_requires=[
        "Django>=4.2",
        "django-filter>=23.1",
        "djangorestframework>=3.14",
        "python-dateutil>=2.8",
    ],
    extras_require={
        "test": ["pytest", "pytest-django"],
    },
)
