"""
Request-authorization gate backed by a remote trust service.

The gate runs in front of an application (as WSGI middleware, as a Flask
extension, or as a stand-alone authorizer service answering NGINX
sub-requests) and decides, before any handler runs, whether a request may
proceed.

For each request:

1. The path and method are checked against the configured secure routes (see
   :mod:`trustgate.classifier`). Requests that are not secure pass through
   untouched.
2. A session identifier is extracted from the session cookie or, failing
   that, from a configured request header (see :mod:`trustgate.sessions`).
   If there is none, the request is rejected with 401.
3. The trust service is asked for a decision on the session (see
   :mod:`trustgate.services.trust`). An allowed request proceeds; a denied
   request is rejected with 403 (or the status supplied by the decision).
   If the trust service cannot be reached, the request is rejected with 502.

The mapping from these steps to HTTP responses lives in
:mod:`trustgate.gate`.
"""
