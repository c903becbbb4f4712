# Backend routes of the WP Cloud vault API; update if the function app changes.

BASE_URL = "https://func-apkevq.azurewebsites.net/api"

AUTH = {
    "login": {
        "method": "POST",
        "path": "/auth/login",
    },
    "register": {
        "method": "POST",
        "path": "/auth/register",
    },
}

FILES = {
    "list": {
        "method": "GET",
        "path": "/files",
    },
    "sas": {
        "method": "POST",
        "path": "/files/sas",
    },
    "analyze": {
        "method": "POST",
        "path": "/files/analyze",
    },
}

STORAGE = {
    "put_blob": {
        "method": "PUT",
        "headers": {"x-ms-blob-type": "BlockBlob"},
    }
}
