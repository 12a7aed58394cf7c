"""API messages and their JSON form, and multicast writers for log streams."""