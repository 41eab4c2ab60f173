CONTENT_TYPE_JSON = "application/json;charset=utf-8"
